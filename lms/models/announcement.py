from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Announcement:
    """A note an admin posts to everyone in a course."""

    id: UUID
    course_id: UUID
    content: str
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def new(*, course_id: UUID, content: str, created_by: UUID) -> Announcement:
        now = datetime.now(UTC)
        return Announcement(
            id=uuid4(),
            course_id=course_id,
            content=content,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
