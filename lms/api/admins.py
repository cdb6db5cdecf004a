"""Admin accounts (/admins/*).  Only an admin can create another admin."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from pydantic import BaseModel

from lms.api.dependencies import AdminUser, StoreDep
from lms.api.schemas import UserOut
from lms.models.user import ROLE_ADMIN
from lms.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admins", tags=["admins"])


class AdminIn(BaseModel):
    name: str
    email: str
    password: str
    phone: str | None = None


@router.get("", response_model=list[UserOut])
async def list_admins(_admin: AdminUser, store: StoreDep) -> list[UserOut]:
    return [UserOut.from_user(u) for u in await store.users.list_by_role(ROLE_ADMIN)]


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_admin(payload: AdminIn, admin: AdminUser, store: StoreDep) -> UserOut:
    user, _ = await auth_service.create_user(
        store.users,
        email=payload.email,
        name=payload.name,
        password=payload.password,
        role=ROLE_ADMIN,
        phone=payload.phone,
    )
    logger.info("Admin created by admin=%s user_id=%s", admin.user_id, user.id)
    return UserOut.from_user(user)
