from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from lms.api.dependencies import AdminUser, StoreDep
from lms.services import enrollment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


class EnrollmentIn(BaseModel):
    studentId: UUID
    courseId: UUID


class EnrollmentOut(BaseModel):
    id: UUID
    studentId: UUID
    courseId: UUID
    enrolledAt: datetime


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
async def enroll(
    payload: EnrollmentIn, admin: AdminUser, store: StoreDep
) -> EnrollmentOut:
    enrollment = await enrollment_service.enroll(
        store, payload.studentId, payload.courseId
    )
    logger.info(
        "Enrollment created by admin=%s enrollment_id=%s", admin.user_id, enrollment.id
    )
    return EnrollmentOut(
        id=enrollment.id,
        studentId=enrollment.student_id,
        courseId=enrollment.course_id,
        enrolledAt=enrollment.enrolled_at,
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def unenroll(payload: EnrollmentIn, _admin: AdminUser, store: StoreDep) -> Response:
    """Remove an enrollment and the student's progress in that course."""
    await enrollment_service.unenroll(store, payload.studentId, payload.courseId)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
