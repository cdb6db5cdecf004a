from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from lms.core.errors import ConflictError, NotFoundError
from lms.models.progress import Enrollment
from lms.models.user import ROLE_STUDENT, User
from lms.repos.store import Store
from lms.services.progress_service import get_active_course, get_student

logger = logging.getLogger(__name__)


async def enroll(store: Store, student_id: UUID, course_id: UUID) -> Enrollment:
    await get_student(store, student_id)
    await get_active_course(store, course_id)

    if await store.progress.get_enrollment(student_id, course_id) is not None:
        raise ConflictError("Student already enrolled in this course")

    enrollment = Enrollment.new(student_id=student_id, course_id=course_id)
    try:
        await store.progress.add_enrollment(enrollment)
    except ValueError as exc:
        # Lost a race with a concurrent enroll of the same pair.
        raise ConflictError("Student already enrolled in this course") from exc

    logger.info("Enrolled student_id=%s course_id=%s", student_id, course_id)
    return enrollment


async def unenroll(store: Store, student_id: UUID, course_id: UUID) -> None:
    """Remove the enrollment and the student's progress on the course's modules."""
    if not await store.progress.unenroll(student_id, course_id):
        raise NotFoundError("Enrollment not found")
    logger.info("Unenrolled student_id=%s course_id=%s", student_id, course_id)


async def enrollment_status(
    store: Store, course_id: UUID
) -> list[tuple[User, Enrollment | None]]:
    """Every student, by name, with their enrollment in the course if any."""
    await get_active_course(store, course_id)
    students, enrollments = await asyncio.gather(
        store.users.list_by_role(ROLE_STUDENT),
        store.progress.list_enrollments(course_id=course_id),
    )
    by_student = {e.student_id: e for e in enrollments}
    return [(s, by_student.get(s.id)) for s in students]
