"""Course announcements (/courses/{course_id}/announcements/*).

Any signed-in user reads them; only admins post, edit or delete.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from lms.api.dependencies import AdminUser, CurrentUser, StoreDep
from lms.models.announcement import Announcement
from lms.models.user import User
from lms.services import announcement_service

router = APIRouter(
    prefix="/courses/{course_id}/announcements", tags=["announcements"]
)


class AnnouncementIn(BaseModel):
    content: str


class AuthorOut(BaseModel):
    id: UUID
    name: str
    role: str


class AnnouncementOut(BaseModel):
    id: UUID
    courseId: UUID
    content: str
    createdBy: UUID
    author: AuthorOut | None = None
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_announcement(
        cls, a: Announcement, author: User | None = None
    ) -> AnnouncementOut:
        return cls(
            id=a.id,
            courseId=a.course_id,
            content=a.content,
            createdBy=a.created_by,
            author=(
                AuthorOut(id=author.id, name=author.name, role=author.role)
                if author is not None
                else None
            ),
            createdAt=a.created_at,
            updatedAt=a.updated_at,
        )


@router.get("", response_model=list[AnnouncementOut])
async def list_announcements(
    course_id: UUID, _principal: CurrentUser, store: StoreDep
) -> list[AnnouncementOut]:
    pairs = await announcement_service.list_announcements(store, course_id)
    return [AnnouncementOut.from_announcement(a, author) for a, author in pairs]


@router.post("", response_model=AnnouncementOut, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    course_id: UUID, payload: AnnouncementIn, admin: AdminUser, store: StoreDep
) -> AnnouncementOut:
    announcement = await announcement_service.create_announcement(
        store, course_id, content=payload.content, author_id=admin.user_id
    )
    author = await store.users.get_by_id(admin.user_id)
    return AnnouncementOut.from_announcement(announcement, author)


@router.put("/{announcement_id}", response_model=AnnouncementOut)
async def update_announcement(
    course_id: UUID,
    announcement_id: UUID,
    payload: AnnouncementIn,
    _admin: AdminUser,
    store: StoreDep,
) -> AnnouncementOut:
    announcement = await announcement_service.update_announcement(
        store, course_id, announcement_id, content=payload.content
    )
    author = await store.users.get_by_id(announcement.created_by)
    return AnnouncementOut.from_announcement(announcement, author)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    course_id: UUID, announcement_id: UUID, _admin: AdminUser, store: StoreDep
) -> Response:
    await announcement_service.delete_announcement(store, course_id, announcement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
