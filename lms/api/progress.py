"""Module completion toggle (POST /progress)."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from lms.api.dependencies import StoreDep, StudentUser
from lms.services import completion_service

router = APIRouter(prefix="/progress", tags=["progress"])


class ProgressIn(BaseModel):
    moduleId: UUID
    completed: bool


class ProgressOut(BaseModel):
    moduleId: UUID
    completed: bool
    completedAt: datetime | None = None


@router.post("", response_model=ProgressOut)
async def set_progress(
    payload: ProgressIn, principal: StudentUser, store: StoreDep
) -> ProgressOut:
    """Mark a module complete or incomplete for the signed-in student.

    Idempotent: repeating a call leaves the same state, and re-marking a
    completed module keeps its first completion time.
    """
    row = await completion_service.set_module_completion(
        store, principal.user_id, payload.moduleId, payload.completed
    )
    return ProgressOut(
        moduleId=row.module_id, completed=row.completed, completedAt=row.completed_at
    )
