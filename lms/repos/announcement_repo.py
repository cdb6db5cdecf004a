from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from lms.models.announcement import Announcement


class AnnouncementRepo(Protocol):
    async def list_by_course(self, course_id: UUID) -> list[Announcement]: ...
    async def get(self, announcement_id: UUID) -> Announcement | None: ...
    async def add(self, announcement: Announcement) -> None: ...
    async def update_content(
        self, announcement_id: UUID, content: str
    ) -> Announcement | None: ...
    async def delete(self, announcement_id: UUID) -> bool: ...


class InMemoryAnnouncementRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Announcement] = {}

    async def list_by_course(self, course_id: UUID) -> list[Announcement]:
        rows = [a for a in self._by_id.values() if a.course_id == course_id]
        # Newest first
        return sorted(rows, key=lambda a: a.created_at, reverse=True)

    async def get(self, announcement_id: UUID) -> Announcement | None:
        return self._by_id.get(announcement_id)

    async def add(self, announcement: Announcement) -> None:
        if announcement.id in self._by_id:
            raise ValueError("announcement already exists")
        self._by_id[announcement.id] = announcement

    async def update_content(
        self, announcement_id: UUID, content: str
    ) -> Announcement | None:
        a = self._by_id.get(announcement_id)
        if a is None:
            return None
        updated = replace(a, content=content, updated_at=datetime.now(UTC))
        self._by_id[announcement_id] = updated
        return updated

    async def delete(self, announcement_id: UUID) -> bool:
        return self._by_id.pop(announcement_id, None) is not None
