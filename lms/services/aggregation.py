"""Pure progress arithmetic over fetched rows.

Nothing here touches the store.  Callers hand in rows that were already
filtered to active courses and active modules; the functions below add
the remaining rules:

  - a student's denominator is the active modules of the courses they
    are enrolled in, and only progress on those modules counts toward
    the numerator
  - a course with zero active modules contributes nothing to any
    average and is never "completed"
  - course completion is judged against the course's *current* active
    modules, so adding a module re-opens a finished course
  - system and per-course averages are enrollment-weighted
    (sum of completed / sum of accessible), never an average of
    per-student percentages
  - percentages round half-up, once, at the end
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime
from uuid import UUID

from lms.models.course import Module
from lms.models.progress import Enrollment, ModuleProgress
from lms.models.stats import (
    CourseSummary,
    DashboardStats,
    StudentCourseStat,
    StudentStats,
)

ModulesByCourse = Mapping[UUID, frozenset[UUID]]


def percent(numerator: int, denominator: int) -> int:
    """Integer percentage rounded half-up; 0 when the denominator is 0.

    Integer arithmetic only: round() in Python rounds half-to-even, and
    float division can land a hair under .5.
    """
    if denominator <= 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)


def group_modules_by_course(modules: Iterable[Module]) -> dict[UUID, frozenset[UUID]]:
    grouped: dict[UUID, set[UUID]] = defaultdict(set)
    for m in modules:
        grouped[m.course_id].add(m.id)
    return {course_id: frozenset(ids) for course_id, ids in grouped.items()}


def completed_module_ids(progress: Iterable[ModuleProgress]) -> frozenset[UUID]:
    return frozenset(p.module_id for p in progress if p.completed)


def course_stat(
    student_id: UUID,
    course_id: UUID,
    course_modules: frozenset[UUID],
    completed: frozenset[UUID],
) -> StudentCourseStat:
    done = len(course_modules & completed)
    total = len(course_modules)
    return StudentCourseStat(
        student_id=student_id,
        course_id=course_id,
        completed_modules_in_course=done,
        total_modules_in_course=total,
        progress_percentage=percent(done, total),
    )


def student_stats(
    student_id: UUID,
    enrollments: Iterable[Enrollment],
    modules_by_course: ModulesByCourse,
    progress: Iterable[ModuleProgress],
) -> StudentStats:
    """Stats for one student.

    enrollments and progress must already be restricted to this student
    and to active courses/modules.  An empty enrollment list yields the
    all-zero result with last_activity None.
    """
    enrolled = {e.course_id for e in enrollments}
    if not enrolled:
        return StudentStats(student_id=student_id)

    accessible: set[UUID] = set()
    for course_id in enrolled:
        accessible |= modules_by_course.get(course_id, frozenset())

    relevant = [p for p in progress if p.module_id in accessible]
    completed = completed_module_ids(relevant)

    completed_courses = sum(
        1
        for course_id in enrolled
        if course_stat(
            student_id,
            course_id,
            modules_by_course.get(course_id, frozenset()),
            completed,
        ).is_completed
    )

    stamps = [p.completed_at for p in relevant if p.completed_at is not None]
    last_activity: datetime | None = max(stamps) if stamps else None

    return StudentStats(
        student_id=student_id,
        enrolled_courses=len(enrolled),
        completed_courses=completed_courses,
        total_modules=len(accessible),
        completed_modules=len(completed),
        average_progress=percent(len(completed), len(accessible)),
        last_activity=last_activity,
    )


def stats_for_students(
    student_ids: Iterable[UUID],
    enrollments: Iterable[Enrollment],
    modules_by_course: ModulesByCourse,
    progress: Iterable[ModuleProgress],
) -> list[StudentStats]:
    """student_stats for many students from one set of table-wide rows."""
    enrollments_by_student: dict[UUID, list[Enrollment]] = defaultdict(list)
    for e in enrollments:
        enrollments_by_student[e.student_id].append(e)
    progress_by_student: dict[UUID, list[ModuleProgress]] = defaultdict(list)
    for p in progress:
        progress_by_student[p.student_id].append(p)

    return [
        student_stats(
            sid,
            enrollments_by_student.get(sid, []),
            modules_by_course,
            progress_by_student.get(sid, []),
        )
        for sid in student_ids
    ]


def course_student_matrix(
    course_id: UUID,
    enrollments: Iterable[Enrollment],
    course_modules: frozenset[UUID],
    progress: Iterable[ModuleProgress],
) -> list[StudentCourseStat]:
    """One StudentCourseStat per enrolled student, in enrollment order."""
    completed_by_student: dict[UUID, set[UUID]] = defaultdict(set)
    for p in progress:
        if p.completed and p.module_id in course_modules:
            completed_by_student[p.student_id].add(p.module_id)

    return [
        course_stat(
            e.student_id,
            course_id,
            course_modules,
            frozenset(completed_by_student.get(e.student_id, ())),
        )
        for e in enrollments
        if e.course_id == course_id
    ]


def _pair_totals(
    enrollments: Iterable[Enrollment],
    modules_by_course: ModulesByCourse,
    progress: Iterable[ModuleProgress],
) -> tuple[int, int, int, list[Enrollment]]:
    """(completed instances, accessible instances, completions, enrollments)."""
    completed_by_student: dict[UUID, set[UUID]] = defaultdict(set)
    for p in progress:
        if p.completed:
            completed_by_student[p.student_id].add(p.module_id)

    rows = list(enrollments)
    done_total = 0
    accessible_total = 0
    completions = 0
    for e in rows:
        stat = course_stat(
            e.student_id,
            e.course_id,
            modules_by_course.get(e.course_id, frozenset()),
            frozenset(completed_by_student.get(e.student_id, ())),
        )
        done_total += stat.completed_modules_in_course
        accessible_total += stat.total_modules_in_course
        if stat.is_completed:
            completions += 1
    return done_total, accessible_total, completions, rows


def course_summary(
    course_id: UUID,
    enrollments: Iterable[Enrollment],
    course_modules: frozenset[UUID],
    progress: Iterable[ModuleProgress],
) -> CourseSummary:
    own = [e for e in enrollments if e.course_id == course_id]
    done, accessible, completions, rows = _pair_totals(
        own, {course_id: course_modules}, progress
    )
    return CourseSummary(
        course_id=course_id,
        module_count=len(course_modules),
        enrolled_students=len(rows),
        average_progress=percent(done, accessible),
        total_completions=completions,
    )


def dashboard_stats(
    *,
    total_courses: int,
    total_students: int,
    enrollments: Iterable[Enrollment],
    modules_by_course: ModulesByCourse,
    progress: Iterable[ModuleProgress],
) -> DashboardStats:
    """System-wide figures in a single pass over table-wide rows."""
    done, accessible, completions, rows = _pair_totals(
        enrollments, modules_by_course, progress
    )
    return DashboardStats(
        total_courses=total_courses,
        total_students=total_students,
        total_modules=sum(len(ids) for ids in modules_by_course.values()),
        average_progress=percent(done, accessible),
        total_completions=completions,
        active_students=len({e.student_id for e in rows}),
    )
