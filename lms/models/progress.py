from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Enrollment:
    """One student in one course; unique per (student_id, course_id).

    progress_percentage is a legacy display hint.  Aggregates are always
    recomputed from ModuleProgress rows and never read it.
    """

    id: UUID
    student_id: UUID
    course_id: UUID
    enrolled_at: datetime
    completed_at: datetime | None = None
    progress_percentage: int = 0

    @staticmethod
    def new(*, student_id: UUID, course_id: UUID) -> Enrollment:
        return Enrollment(
            id=uuid4(),
            student_id=student_id,
            course_id=course_id,
            enrolled_at=datetime.now(UTC),
        )


@dataclass(frozen=True, slots=True)
class ModuleProgress:
    """Completion record for one (student, module) pair.

    Upserted on every toggle, so the same row flips between
    completed and incomplete.
    """

    id: UUID
    student_id: UUID
    module_id: UUID
    completed: bool = False
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @staticmethod
    def new(
        *,
        student_id: UUID,
        module_id: UUID,
        completed: bool,
        completed_at: datetime | None,
    ) -> ModuleProgress:
        return ModuleProgress(
            id=uuid4(),
            student_id=student_id,
            module_id=module_id,
            completed=completed,
            completed_at=completed_at,
            created_at=datetime.now(UTC),
        )

