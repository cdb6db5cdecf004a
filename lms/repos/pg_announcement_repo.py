"""PostgreSQL implementation of AnnouncementRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, select, update

from lms.db.tables import AnnouncementRow
from lms.models.announcement import Announcement
from lms.repos.pg_base import PgRepoBase


class PgAnnouncementRepo(PgRepoBase):
    async def list_by_course(self, course_id: UUID) -> list[Announcement]:
        stmt = (
            select(AnnouncementRow)
            .where(AnnouncementRow.course_id == course_id)
            .order_by(AnnouncementRow.created_at.desc())
        )
        async with self._read("list_announcements", course_id=course_id) as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_announcement(r) for r in rows]

    async def get(self, announcement_id: UUID) -> Announcement | None:
        async with self._read(
            "get_announcement", announcement_id=announcement_id
        ) as session:
            row = await session.get(AnnouncementRow, announcement_id)
        return _row_to_announcement(row) if row is not None else None

    async def add(self, announcement: Announcement) -> None:
        async with self._write(
            "add_announcement",
            announcement_id=announcement.id,
            course_id=announcement.course_id,
        ) as session:
            session.add(
                AnnouncementRow(
                    id=announcement.id,
                    course_id=announcement.course_id,
                    content=announcement.content,
                    created_by=announcement.created_by,
                    created_at=announcement.created_at,
                    updated_at=announcement.updated_at,
                )
            )

    async def update_content(
        self, announcement_id: UUID, content: str
    ) -> Announcement | None:
        stmt = (
            update(AnnouncementRow)
            .where(AnnouncementRow.id == announcement_id)
            .values(content=content, updated_at=func.now())
            .returning(AnnouncementRow)
        )
        async with self._write(
            "update_announcement", announcement_id=announcement_id
        ) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _row_to_announcement(row) if row is not None else None

    async def delete(self, announcement_id: UUID) -> bool:
        stmt = delete(AnnouncementRow).where(AnnouncementRow.id == announcement_id)
        async with self._write(
            "delete_announcement", announcement_id=announcement_id
        ) as session:
            result = await session.execute(stmt)
            return result.rowcount > 0


def _row_to_announcement(row: AnnouncementRow) -> Announcement:
    return Announcement(
        id=row.id,
        course_id=row.course_id,
        content=row.content,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
