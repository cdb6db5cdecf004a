from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from lms.api.dependencies import AdminUser, CurrentUser, StoreDep
from lms.api.schemas import (
    CourseDetailOut,
    CourseOut,
    CourseSummaryOut,
    ModuleOut,
    StudentCourseStatOut,
)
from lms.services import course_service, enrollment_service, progress_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


class CourseIn(BaseModel):
    title: str
    description: str | None = None
    thumbnailUrl: str | None = None


class CourseUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    thumbnailUrl: str | None = None


class ModuleIn(BaseModel):
    title: str
    videoUrl: str
    description: str | None = None
    durationMinutes: int = Field(default=0, ge=0)


class ModuleUpdateIn(BaseModel):
    title: str | None = None
    videoUrl: str | None = None
    description: str | None = None
    durationMinutes: int | None = Field(default=None, ge=0)


class ModuleOrderIn(BaseModel):
    moduleIds: list[UUID]


class CourseStudentOut(StudentCourseStatOut):
    name: str
    email: str


class EnrollmentStatusOut(BaseModel):
    studentId: UUID
    name: str
    email: str
    phone: str | None = None
    enrolled: bool
    enrolledAt: datetime | None = None


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


@router.get("", response_model=list[CourseOut])
async def list_courses(_principal: CurrentUser, store: StoreDep) -> list[CourseOut]:
    return [CourseOut.from_course(c) for c in await course_service.list_courses(store)]


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseIn, principal: AdminUser, store: StoreDep
) -> CourseOut:
    course = await course_service.create_course(
        store,
        title=payload.title,
        description=payload.description,
        thumbnail_url=payload.thumbnailUrl,
        created_by=principal.user_id,
    )
    return CourseOut.from_course(course)


@router.get("/stats", response_model=list[CourseSummaryOut])
async def course_stats(_admin: AdminUser, store: StoreDep) -> list[CourseSummaryOut]:
    summaries = await progress_service.compute_course_summaries(store)
    return [CourseSummaryOut.from_pair(c, s) for c, s in summaries]


@router.get("/{course_id}", response_model=CourseDetailOut)
async def get_course(
    course_id: UUID, _principal: CurrentUser, store: StoreDep
) -> CourseDetailOut:
    course, modules = await course_service.get_course_with_modules(store, course_id)
    return CourseDetailOut(
        **CourseOut.from_course(course).model_dump(),
        modules=[ModuleOut.from_module(m) for m in modules],
    )


@router.put("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: UUID, payload: CourseUpdateIn, _admin: AdminUser, store: StoreDep
) -> CourseOut:
    course = await course_service.update_course(
        store,
        course_id,
        title=payload.title,
        description=payload.description,
        thumbnail_url=payload.thumbnailUrl,
    )
    return CourseOut.from_course(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(course_id: UUID, _admin: AdminUser, store: StoreDep) -> Response:
    await course_service.delete_course(store, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{course_id}/students", response_model=list[CourseStudentOut])
async def course_students(
    course_id: UUID, _admin: AdminUser, store: StoreDep
) -> list[CourseStudentOut]:
    matrix = await progress_service.compute_course_student_matrix(store, course_id)
    return [
        CourseStudentOut(
            **StudentCourseStatOut.from_stat(stat).model_dump(),
            name=user.name,
            email=user.email,
        )
        for user, stat in matrix
    ]


@router.get(
    "/{course_id}/enrollment-status", response_model=list[EnrollmentStatusOut]
)
async def enrollment_status(
    course_id: UUID, _admin: AdminUser, store: StoreDep
) -> list[EnrollmentStatusOut]:
    rows = await enrollment_service.enrollment_status(store, course_id)
    return [
        EnrollmentStatusOut(
            studentId=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            enrolled=enrollment is not None,
            enrolledAt=enrollment.enrolled_at if enrollment is not None else None,
        )
        for user, enrollment in rows
    ]


# ---------------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------------


@router.get("/{course_id}/modules", response_model=list[ModuleOut])
async def list_modules(
    course_id: UUID, _principal: CurrentUser, store: StoreDep
) -> list[ModuleOut]:
    modules = await course_service.list_modules(store, course_id)
    return [ModuleOut.from_module(m) for m in modules]


@router.post(
    "/{course_id}/modules",
    response_model=ModuleOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_module(
    course_id: UUID, payload: ModuleIn, _admin: AdminUser, store: StoreDep
) -> ModuleOut:
    module = await course_service.create_module(
        store,
        course_id,
        title=payload.title,
        video_url=payload.videoUrl,
        description=payload.description,
        duration_minutes=payload.durationMinutes,
    )
    return ModuleOut.from_module(module)


@router.put("/{course_id}/modules/order", response_model=list[ModuleOut])
async def reorder_modules(
    course_id: UUID, payload: ModuleOrderIn, _admin: AdminUser, store: StoreDep
) -> list[ModuleOut]:
    modules = await course_service.reorder_modules(store, course_id, payload.moduleIds)
    return [ModuleOut.from_module(m) for m in modules]


@router.put("/{course_id}/modules/{module_id}", response_model=ModuleOut)
async def update_module(
    course_id: UUID,
    module_id: UUID,
    payload: ModuleUpdateIn,
    _admin: AdminUser,
    store: StoreDep,
) -> ModuleOut:
    module = await course_service.update_module(
        store,
        course_id,
        module_id,
        title=payload.title,
        video_url=payload.videoUrl,
        description=payload.description,
        duration_minutes=payload.durationMinutes,
    )
    return ModuleOut.from_module(module)


@router.delete(
    "/{course_id}/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_module(
    course_id: UUID, module_id: UUID, _admin: AdminUser, store: StoreDep
) -> Response:
    await course_service.delete_module(store, course_id, module_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
