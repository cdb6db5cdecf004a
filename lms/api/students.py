"""Admin view of students (/students/*)."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, status
from pydantic import BaseModel

from lms.api.dependencies import AdminUser, StoreDep
from lms.api.schemas import (
    CourseOut,
    StudentCourseStatOut,
    StudentStatsOut,
    StudentWithStatsOut,
    UserOut,
)
from lms.models.user import ROLE_STUDENT
from lms.services import auth_service, progress_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["students"])


class StudentIn(BaseModel):
    name: str
    email: str
    phone: str | None = None
    password: str | None = None  # omitted -> a temporary one is generated


class StudentUpdateIn(BaseModel):
    name: str
    email: str
    phone: str | None = None


class StudentCreatedOut(BaseModel):
    user: UserOut
    temporaryPassword: str | None = None


class StudentDetailOut(BaseModel):
    user: UserOut
    stats: StudentStatsOut


class StudentCourseOut(BaseModel):
    course: CourseOut
    progress: StudentCourseStatOut


class PasswordResetOut(BaseModel):
    temporaryPassword: str


@router.get("", response_model=list[UserOut])
async def list_students(_admin: AdminUser, store: StoreDep) -> list[UserOut]:
    students = await store.users.list_by_role(ROLE_STUDENT)
    return [UserOut.from_user(u) for u in students]


@router.post("", response_model=StudentCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentIn, admin: AdminUser, store: StoreDep
) -> StudentCreatedOut:
    user, generated = await auth_service.create_user(
        store.users,
        email=payload.email,
        name=payload.name,
        password=payload.password,
        role=ROLE_STUDENT,
        phone=payload.phone,
    )
    logger.info("Student created by admin=%s student_id=%s", admin.user_id, user.id)
    return StudentCreatedOut(user=UserOut.from_user(user), temporaryPassword=generated)


@router.get("/stats", response_model=list[StudentWithStatsOut])
async def all_student_stats(
    _admin: AdminUser, store: StoreDep
) -> list[StudentWithStatsOut]:
    pairs = await progress_service.compute_all_student_stats(store)
    return [StudentWithStatsOut.from_pair(u, s) for u, s in pairs]


@router.get("/{student_id}", response_model=StudentDetailOut)
async def get_student(
    student_id: UUID, _admin: AdminUser, store: StoreDep
) -> StudentDetailOut:
    user = await progress_service.get_student(store, student_id)
    stats = await progress_service.compute_student_stats(store, student_id)
    return StudentDetailOut(
        user=UserOut.from_user(user), stats=StudentStatsOut.from_stats(stats)
    )


@router.put("/{student_id}", response_model=UserOut)
async def update_student(
    student_id: UUID, payload: StudentUpdateIn, _admin: AdminUser, store: StoreDep
) -> UserOut:
    await progress_service.get_student(store, student_id)
    user = await auth_service.update_profile(
        store.users,
        student_id,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
    )
    return UserOut.from_user(user)


@router.get("/{student_id}/stats", response_model=StudentStatsOut)
async def student_stats(
    student_id: UUID, _admin: AdminUser, store: StoreDep
) -> StudentStatsOut:
    stats = await progress_service.compute_student_stats(store, student_id)
    return StudentStatsOut.from_stats(stats)


@router.get("/{student_id}/courses", response_model=list[StudentCourseOut])
async def student_courses(
    student_id: UUID, _admin: AdminUser, store: StoreDep
) -> list[StudentCourseOut]:
    breakdown = await progress_service.compute_student_course_breakdown(
        store, student_id
    )
    return [
        StudentCourseOut(
            course=CourseOut.from_course(c), progress=StudentCourseStatOut.from_stat(s)
        )
        for c, s in breakdown
    ]


@router.post("/{student_id}/reset-password", response_model=PasswordResetOut)
async def reset_password(
    student_id: UUID, admin: AdminUser, store: StoreDep
) -> PasswordResetOut:
    await progress_service.get_student(store, student_id)
    password = await auth_service.reset_password(store.users, student_id)
    logger.info("Password reset by admin=%s student_id=%s", admin.user_id, student_id)
    return PasswordResetOut(temporaryPassword=password)
