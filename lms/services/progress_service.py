"""Progress Aggregator: completion metrics read straight from the store.

Every function fetches the rows it needs with concurrent reads
(asyncio.gather), then hands them to the pure functions in
lms.services.aggregation.  Nothing is cached and nothing is written.

Store failures propagate.  A failing read in any gathered query fails
the whole call, batch calls included; no path here turns an exception
into zeroed stats.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

from lms.core.errors import ForbiddenError, NotFoundError
from lms.core.metrics import AGGREGATION_COUNT, AGGREGATION_DURATION
from lms.models.course import Course, Module
from lms.models.stats import (
    CourseSummary,
    DashboardStats,
    StudentCourseStat,
    StudentCourseView,
    StudentStats,
)
from lms.models.user import ROLE_STUDENT, User
from lms.repos.store import Store
from lms.services import aggregation

logger = logging.getLogger(__name__)


@contextmanager
def _observed(scope: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        AGGREGATION_COUNT.labels(scope=scope).inc()
        AGGREGATION_DURATION.labels(scope=scope).observe(time.perf_counter() - start)


async def get_student(store: Store, student_id: UUID) -> User:
    """Resolve a student or raise NotFoundError (also for non-student accounts)."""
    user = await store.users.get_by_id(student_id)
    if user is None or user.role != ROLE_STUDENT:
        raise NotFoundError("Student not found")
    return user


async def get_active_course(store: Store, course_id: UUID) -> Course:
    course = await store.courses.get_course(course_id, active_only=True)
    if course is None:
        raise NotFoundError("Course not found")
    return course


async def compute_student_stats(store: Store, student_id: UUID) -> StudentStats:
    await get_student(store, student_id)
    with _observed("student"):
        enrollments, modules, progress = await asyncio.gather(
            store.progress.list_enrollments(
                student_id=student_id, active_courses_only=True
            ),
            store.courses.list_modules(active_only=True),
            store.progress.list_module_progress(
                student_id=student_id,
                active_modules_only=True,
                active_courses_only=True,
            ),
        )
        stats = aggregation.student_stats(
            student_id,
            enrollments,
            aggregation.group_modules_by_course(modules),
            progress,
        )
    logger.debug(
        "Student stats student_id=%s enrolled=%d completed_modules=%d/%d",
        student_id,
        stats.enrolled_courses,
        stats.completed_modules,
        stats.total_modules,
    )
    return stats


async def compute_all_student_stats(
    store: Store,
) -> list[tuple[User, StudentStats]]:
    """Stats for every student from four table-wide reads.

    Ordered like list_by_role (by name).
    """
    with _observed("all_students"):
        students, enrollments, modules, progress = await asyncio.gather(
            store.users.list_by_role(ROLE_STUDENT),
            store.progress.list_enrollments(active_courses_only=True),
            store.courses.list_modules(active_only=True),
            store.progress.list_module_progress(
                active_modules_only=True, active_courses_only=True
            ),
        )
        stats = aggregation.stats_for_students(
            [s.id for s in students],
            enrollments,
            aggregation.group_modules_by_course(modules),
            progress,
        )
    logger.info("Computed stats for %d students", len(students))
    return list(zip(students, stats, strict=True))


async def compute_course_student_matrix(
    store: Store, course_id: UUID
) -> list[tuple[User, StudentCourseStat]]:
    """Per-student progress inside one active course, newest enrollment first.

    Enrollments whose user no longer resolves are skipped.
    """
    await get_active_course(store, course_id)
    with _observed("course"):
        enrollments, modules, progress = await asyncio.gather(
            store.progress.list_enrollments(
                course_id=course_id, active_courses_only=True
            ),
            store.courses.list_modules(course_id, active_only=True),
            store.progress.list_module_progress(
                course_id=course_id,
                active_modules_only=True,
                active_courses_only=True,
            ),
        )
        users = await asyncio.gather(
            *(store.users.get_by_id(e.student_id) for e in enrollments)
        )
        matrix = aggregation.course_student_matrix(
            course_id,
            enrollments,
            frozenset(m.id for m in modules),
            progress,
        )
    return [(u, stat) for u, stat in zip(users, matrix, strict=True) if u is not None]


async def compute_student_course_breakdown(
    store: Store, student_id: UUID
) -> list[tuple[Course, StudentCourseStat]]:
    """One fragment per active course the student is enrolled in."""
    await get_student(store, student_id)
    with _observed("student"):
        enrollments, courses, modules, progress = await asyncio.gather(
            store.progress.list_enrollments(
                student_id=student_id, active_courses_only=True
            ),
            store.courses.list_courses(active_only=True),
            store.courses.list_modules(active_only=True),
            store.progress.list_module_progress(
                student_id=student_id,
                active_modules_only=True,
                active_courses_only=True,
            ),
        )
        by_course = aggregation.group_modules_by_course(modules)
        completed = aggregation.completed_module_ids(progress)
        courses_by_id = {c.id: c for c in courses}
        breakdown = [
            (
                courses_by_id[e.course_id],
                aggregation.course_stat(
                    student_id,
                    e.course_id,
                    by_course.get(e.course_id, frozenset()),
                    completed,
                ),
            )
            for e in enrollments
            if e.course_id in courses_by_id
        ]
    return breakdown


async def compute_course_summaries(store: Store) -> list[tuple[Course, CourseSummary]]:
    """Summary for every active course, newest course first."""
    with _observed("course_summary"):
        courses, enrollments, modules, progress = await asyncio.gather(
            store.courses.list_courses(active_only=True),
            store.progress.list_enrollments(active_courses_only=True),
            store.courses.list_modules(active_only=True),
            store.progress.list_module_progress(
                active_modules_only=True, active_courses_only=True
            ),
        )
        by_course = aggregation.group_modules_by_course(modules)
        return [
            (
                c,
                aggregation.course_summary(
                    c.id, enrollments, by_course.get(c.id, frozenset()), progress
                ),
            )
            for c in courses
        ]


async def compute_course_summary(store: Store, course_id: UUID) -> CourseSummary:
    await get_active_course(store, course_id)
    with _observed("course_summary"):
        enrollments, modules, progress = await asyncio.gather(
            store.progress.list_enrollments(
                course_id=course_id, active_courses_only=True
            ),
            store.courses.list_modules(course_id, active_only=True),
            store.progress.list_module_progress(
                course_id=course_id,
                active_modules_only=True,
                active_courses_only=True,
            ),
        )
        return aggregation.course_summary(
            course_id, enrollments, frozenset(m.id for m in modules), progress
        )


async def compute_system_dashboard_stats(store: Store) -> DashboardStats:
    with _observed("dashboard"):
        courses, modules, total_students, enrollments, progress = await asyncio.gather(
            store.courses.list_courses(active_only=True),
            store.courses.list_modules(active_only=True),
            store.users.count_by_role(ROLE_STUDENT),
            store.progress.list_enrollments(active_courses_only=True),
            store.progress.list_module_progress(
                active_modules_only=True, active_courses_only=True
            ),
        )
        active = {c.id for c in courses}
        stats = aggregation.dashboard_stats(
            total_courses=len(courses),
            total_students=total_students,
            enrollments=enrollments,
            modules_by_course=aggregation.group_modules_by_course(
                m for m in modules if m.course_id in active
            ),
            progress=progress,
        )
    logger.info(
        "Dashboard stats courses=%d students=%d average=%d",
        stats.total_courses,
        stats.total_students,
        stats.average_progress,
    )
    return stats


async def compute_student_course_views(
    store: Store, student_id: UUID, course_id: UUID | None = None
) -> list[StudentCourseView]:
    """The student's enrolled active courses with per-module completion.

    With course_id, returns just that course and raises NotFoundError if
    it is missing or inactive, ForbiddenError if the student is not
    enrolled in it.
    """
    if course_id is not None:
        await get_active_course(store, course_id)
        if await store.progress.get_enrollment(student_id, course_id) is None:
            raise ForbiddenError("Not enrolled in this course")

    with _observed("student"):
        enrollments, courses, modules, progress = await asyncio.gather(
            store.progress.list_enrollments(
                student_id=student_id, course_id=course_id, active_courses_only=True
            ),
            store.courses.list_courses(active_only=True),
            store.courses.list_modules(course_id, active_only=True),
            store.progress.list_module_progress(
                student_id=student_id,
                course_id=course_id,
                active_modules_only=True,
                active_courses_only=True,
            ),
        )
        courses_by_id = {c.id: c for c in courses}
        completed_at = {p.module_id: p.completed_at for p in progress if p.completed}
        modules_by_course: dict[UUID, list[Module]] = defaultdict(list)
        for m in modules:
            modules_by_course[m.course_id].append(m)

        views = []
        for e in enrollments:
            course = courses_by_id.get(e.course_id)
            if course is None:
                continue
            course_modules = modules_by_course.get(e.course_id, [])
            ids = frozenset(m.id for m in course_modules)
            views.append(
                StudentCourseView(
                    course=course,
                    modules=course_modules,
                    completed_at={k: v for k, v in completed_at.items() if k in ids},
                    stat=aggregation.course_stat(
                        student_id, e.course_id, ids, frozenset(completed_at)
                    ),
                )
            )
    return views
