"""Completion Mutator: a student marks a module complete or incomplete.

One upsert per call, keyed by (student, module).  Enrollment progress
is never recomputed here; aggregates always read module_progress.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from lms.core.errors import ForbiddenError, NotFoundError
from lms.core.metrics import COMPLETION_UPDATES
from lms.models.progress import ModuleProgress
from lms.repos.store import Store

logger = logging.getLogger(__name__)


async def set_module_completion(
    store: Store,
    student_id: UUID,
    module_id: UUID,
    completed: bool,
    now: datetime | None = None,
) -> ModuleProgress:
    """Upsert the (student, module) progress row.

    completed_at rules:
      - completed=False always clears it
      - completed=True stamps `now`, unless the row is already complete,
        in which case the first completion time is kept

    Raises NotFoundError when the module (or its course) is missing or
    inactive, and ForbiddenError when the student is not enrolled in the
    module's course.  Nothing is written in either case.
    """
    module = await store.courses.get_module(module_id, active_only=True)
    if module is None:
        raise NotFoundError("Module not found")
    if await store.courses.get_course(module.course_id, active_only=True) is None:
        raise NotFoundError("Module not found")
    if await store.progress.get_enrollment(student_id, module.course_id) is None:
        logger.warning(
            "Completion rejected, not enrolled student_id=%s module_id=%s",
            student_id,
            module_id,
        )
        raise ForbiddenError("Not enrolled in this course")

    completed_at: datetime | None = None
    if completed:
        existing = await store.progress.get_module_progress(student_id, module_id)
        if existing is not None and existing.completed and existing.completed_at:
            completed_at = existing.completed_at
        else:
            completed_at = now or datetime.now(UTC)

    row = await store.progress.upsert_module_progress(
        student_id, module_id, completed=completed, completed_at=completed_at
    )
    COMPLETION_UPDATES.labels(completed=str(completed).lower()).inc()
    logger.info(
        "Module completion set student_id=%s module_id=%s completed=%s",
        student_id,
        module_id,
        completed,
    )
    return row
