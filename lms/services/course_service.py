"""Course and module administration.

Deletes are soft (is_active=False).  Active modules of a course always
carry order_index 0..n-1: appends go to the end, deletes close the gap
and reorders rewrite the whole sequence.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from uuid import UUID

from lms.core.errors import InvalidInputError, NotFoundError
from lms.models.course import Course, Module
from lms.repos.store import Store
from lms.services.progress_service import get_active_course

logger = logging.getLogger(__name__)

_YOUTUBE_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#/]+)"),
    re.compile(r"youtube\.com/watch\?.*\bv=([^&\n?#]+)"),
)


def extract_youtube_video_id(url: str) -> str | None:
    """Video id from a watch, youtu.be or embed URL; None when unrecognised."""
    for pattern in _YOUTUBE_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return match.group(1)
    return None


def youtube_embed_url(url: str) -> str | None:
    video_id = extract_youtube_video_id(url)
    if video_id is None:
        return None
    return f"https://www.youtube.com/embed/{video_id}?rel=0&modestbranding=1"


def _require_title(title: str | None) -> str:
    title = (title or "").strip()
    if not title:
        raise InvalidInputError("Title is required")
    return title


def _require_video_url(url: str | None) -> str:
    url = (url or "").strip()
    if extract_youtube_video_id(url) is None:
        raise InvalidInputError("A valid YouTube video URL is required")
    return url


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


async def list_courses(store: Store) -> list[Course]:
    return await store.courses.list_courses(active_only=True)


async def get_course_with_modules(
    store: Store, course_id: UUID
) -> tuple[Course, list[Module]]:
    course = await get_active_course(store, course_id)
    modules = await store.courses.list_modules(course_id, active_only=True)
    return course, modules


async def create_course(
    store: Store,
    *,
    title: str,
    description: str | None = None,
    thumbnail_url: str | None = None,
    created_by: UUID | None = None,
) -> Course:
    course = Course.new(
        title=_require_title(title),
        description=description,
        thumbnail_url=thumbnail_url,
        created_by=created_by,
    )
    await store.courses.add_course(course)
    logger.info("Created course course_id=%s", course.id)
    return course


async def update_course(store: Store, course_id: UUID, **fields: Any) -> Course:
    """Update the given fields; fields passed as None are left unchanged."""
    changes = {k: v for k, v in fields.items() if v is not None}
    if "title" in changes:
        changes["title"] = _require_title(changes["title"])
    course = await store.courses.update_course(course_id, **changes)
    if course is None:
        raise NotFoundError("Course not found")
    logger.info("Updated course course_id=%s fields=%s", course_id, sorted(changes))
    return course


async def delete_course(store: Store, course_id: UUID) -> None:
    if not await store.courses.deactivate_course(course_id):
        raise NotFoundError("Course not found")
    logger.info("Deactivated course course_id=%s", course_id)


# ---------------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------------


async def list_modules(store: Store, course_id: UUID) -> list[Module]:
    await get_active_course(store, course_id)
    return await store.courses.list_modules(course_id, active_only=True)


async def create_module(
    store: Store,
    course_id: UUID,
    *,
    title: str,
    video_url: str,
    description: str | None = None,
    duration_minutes: int = 0,
) -> Module:
    await get_active_course(store, course_id)
    existing = await store.courses.list_modules(course_id, active_only=True)
    module = Module.new(
        course_id=course_id,
        title=_require_title(title),
        video_url=_require_video_url(video_url),
        order_index=len(existing),
        description=description,
        duration_minutes=duration_minutes,
    )
    await store.courses.add_module(module)
    logger.info(
        "Created module module_id=%s course_id=%s order_index=%d",
        module.id,
        course_id,
        module.order_index,
    )
    return module


async def _get_course_module(store: Store, course_id: UUID, module_id: UUID) -> Module:
    await get_active_course(store, course_id)
    module = await store.courses.get_module(module_id, active_only=True)
    if module is None or module.course_id != course_id:
        raise NotFoundError("Module not found")
    return module


async def update_module(
    store: Store, course_id: UUID, module_id: UUID, **fields: Any
) -> Module:
    await _get_course_module(store, course_id, module_id)
    changes = {k: v for k, v in fields.items() if v is not None}
    if "title" in changes:
        changes["title"] = _require_title(changes["title"])
    if "video_url" in changes:
        changes["video_url"] = _require_video_url(changes["video_url"])
    module = await store.courses.update_module(module_id, **changes)
    if module is None:
        raise NotFoundError("Module not found")
    return module


async def delete_module(store: Store, course_id: UUID, module_id: UUID) -> None:
    await _get_course_module(store, course_id, module_id)
    if not await store.courses.deactivate_module(module_id):
        raise NotFoundError("Module not found")
    remaining = await store.courses.list_modules(course_id, active_only=True)
    await store.courses.reorder_modules(course_id, [m.id for m in remaining])
    logger.info("Deactivated module module_id=%s course_id=%s", module_id, course_id)


async def reorder_modules(
    store: Store, course_id: UUID, module_ids: list[UUID]
) -> list[Module]:
    """Rewrite order_index to follow module_ids.

    module_ids must be exactly the course's active modules, each once.
    """
    await get_active_course(store, course_id)
    current = await store.courses.list_modules(course_id, active_only=True)
    if len(module_ids) != len(set(module_ids)) or set(module_ids) != {
        m.id for m in current
    }:
        raise InvalidInputError(
            "Module order must list every active module of the course exactly once"
        )
    await store.courses.reorder_modules(course_id, module_ids)
    logger.info("Reordered %d modules course_id=%s", len(module_ids), course_id)
    return await store.courses.list_modules(course_id, active_only=True)
