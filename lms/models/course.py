from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    created_by: UUID | None = None
    is_active: bool = True  # False = soft-deleted
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        title: str,
        description: str | None = None,
        thumbnail_url: str | None = None,
        created_by: UUID | None = None,
    ) -> Course:
        now = datetime.now(UTC)
        return Course(
            id=uuid4(),
            title=title,
            description=description,
            thumbnail_url=thumbnail_url,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class Module:
    """A YouTube-backed lesson inside exactly one course."""

    id: UUID
    course_id: UUID
    title: str
    video_url: str
    order_index: int
    description: str | None = None
    duration_minutes: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        video_url: str,
        order_index: int,
        description: str | None = None,
        duration_minutes: int = 0,
    ) -> Module:
        now = datetime.now(UTC)
        return Module(
            id=uuid4(),
            course_id=course_id,
            title=title,
            video_url=video_url,
            order_index=order_index,
            description=description,
            duration_minutes=duration_minutes,
            created_at=now,
            updated_at=now,
        )
