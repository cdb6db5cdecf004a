"""Derived progress metrics.

Computed by the Progress Aggregator on every read and never persisted.
All counts are non-negative and every percentage is an integer in
[0, 100].
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from lms.models.course import Course, Module


@dataclass(frozen=True, slots=True)
class StudentStats:
    student_id: UUID
    enrolled_courses: int = 0
    completed_courses: int = 0
    total_modules: int = 0  # accessible: active modules of active enrolled courses
    completed_modules: int = 0
    average_progress: int = 0
    last_activity: datetime | None = None


@dataclass(frozen=True, slots=True)
class StudentCourseStat:
    """Progress of one student within one course."""

    student_id: UUID
    course_id: UUID
    completed_modules_in_course: int
    total_modules_in_course: int
    progress_percentage: int

    @property
    def is_completed(self) -> bool:
        # Zero-module courses are never complete.
        return (
            self.total_modules_in_course > 0
            and self.completed_modules_in_course == self.total_modules_in_course
        )


@dataclass(frozen=True, slots=True)
class CourseSummary:
    course_id: UUID
    module_count: int
    enrolled_students: int
    average_progress: int  # enrollment-weighted
    total_completions: int


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_courses: int
    total_students: int
    total_modules: int
    average_progress: int  # enrollment-weighted
    total_completions: int
    active_students: int


@dataclass(frozen=True, slots=True)
class StudentCourseView:
    """A course as one enrolled student sees it."""

    course: Course
    modules: list[Module]  # active, in order
    completed_at: dict[UUID, datetime | None]  # completed module id -> when
    stat: StudentCourseStat
