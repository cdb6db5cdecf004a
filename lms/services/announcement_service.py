"""Course announcements.

Announcements hang off an active course.  Once the course is
soft-deleted its announcements are neither listed nor editable.
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from lms.core.errors import InvalidInputError, NotFoundError
from lms.models.announcement import Announcement
from lms.models.user import User
from lms.repos.store import Store
from lms.services.progress_service import get_active_course

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 5000


def validate_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidInputError("Announcement content is required")
    if len(content) > MAX_CONTENT_LENGTH:
        raise InvalidInputError(
            f"Content cannot exceed {MAX_CONTENT_LENGTH} characters"
        )
    return content


async def list_announcements(
    store: Store, course_id: UUID
) -> list[tuple[Announcement, User | None]]:
    """Newest first, each paired with its author (None if the account is gone)."""
    await get_active_course(store, course_id)
    announcements = await store.announcements.list_by_course(course_id)
    author_ids = list({a.created_by for a in announcements})
    authors = await asyncio.gather(*(store.users.get_by_id(i) for i in author_ids))
    by_id = dict(zip(author_ids, authors, strict=True))
    return [(a, by_id[a.created_by]) for a in announcements]


async def create_announcement(
    store: Store, course_id: UUID, *, content: str, author_id: UUID
) -> Announcement:
    content = validate_content(content)
    await get_active_course(store, course_id)
    announcement = Announcement.new(
        course_id=course_id, content=content, created_by=author_id
    )
    await store.announcements.add(announcement)
    logger.info(
        "Announcement created id=%s course_id=%s author=%s",
        announcement.id,
        course_id,
        author_id,
    )
    return announcement


async def _get_in_course(
    store: Store, course_id: UUID, announcement_id: UUID
) -> Announcement:
    await get_active_course(store, course_id)
    announcement = await store.announcements.get(announcement_id)
    if announcement is None or announcement.course_id != course_id:
        raise NotFoundError("Announcement not found")
    return announcement


async def update_announcement(
    store: Store, course_id: UUID, announcement_id: UUID, *, content: str
) -> Announcement:
    content = validate_content(content)
    await _get_in_course(store, course_id, announcement_id)
    updated = await store.announcements.update_content(announcement_id, content)
    if updated is None:
        raise NotFoundError("Announcement not found")
    return updated


async def delete_announcement(
    store: Store, course_id: UUID, announcement_id: UUID
) -> None:
    await _get_in_course(store, course_id, announcement_id)
    if not await store.announcements.delete(announcement_id):
        raise NotFoundError("Announcement not found")
    logger.info("Announcement deleted id=%s course_id=%s", announcement_id, course_id)
