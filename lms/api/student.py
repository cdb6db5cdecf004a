"""The signed-in student's own view (/student/*)."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from lms.api.dependencies import StoreDep, StudentUser
from lms.api.schemas import CourseOut, ModuleOut, StudentCourseStatOut, StudentStatsOut
from lms.models.stats import StudentCourseView
from lms.services import progress_service

router = APIRouter(prefix="/student", tags=["student"])


class StudentModuleOut(ModuleOut):
    completed: bool
    completedAt: datetime | None = None


class StudentCourseOut(CourseOut):
    modules: list[StudentModuleOut]
    progress: StudentCourseStatOut


def _course_out(view: StudentCourseView) -> StudentCourseOut:
    return StudentCourseOut(
        **CourseOut.from_course(view.course).model_dump(),
        modules=[
            StudentModuleOut(
                **ModuleOut.from_module(m).model_dump(),
                completed=m.id in view.completed_at,
                completedAt=view.completed_at.get(m.id),
            )
            for m in view.modules
        ],
        progress=StudentCourseStatOut.from_stat(view.stat),
    )


@router.get("/stats", response_model=StudentStatsOut)
async def my_stats(principal: StudentUser, store: StoreDep) -> StudentStatsOut:
    stats = await progress_service.compute_student_stats(store, principal.user_id)
    return StudentStatsOut.from_stats(stats)


@router.get("/courses", response_model=list[StudentCourseOut])
async def my_courses(principal: StudentUser, store: StoreDep) -> list[StudentCourseOut]:
    views = await progress_service.compute_student_course_views(
        store, principal.user_id
    )
    return [_course_out(v) for v in views]


@router.get("/courses/{course_id}", response_model=StudentCourseOut)
async def my_course(
    course_id: UUID, principal: StudentUser, store: StoreDep
) -> StudentCourseOut:
    (view,) = await progress_service.compute_student_course_views(
        store, principal.user_id, course_id
    )
    return _course_out(view)
