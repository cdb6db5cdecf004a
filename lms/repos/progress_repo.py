"""Enrollment and module-progress persistence.

The "active" filters mirror inner joins in SQL: a row is only visible
when the course (and, for progress, the module) it hangs off is active.
The in-memory implementation resolves those joins against the course
repo it was built with.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Protocol
from uuid import UUID

from lms.models.progress import Enrollment, ModuleProgress
from lms.repos.course_repo import InMemoryCourseRepo


class ProgressRepo(Protocol):
    async def list_enrollments(
        self,
        *,
        student_id: UUID | None = None,
        course_id: UUID | None = None,
        active_courses_only: bool = True,
    ) -> list[Enrollment]: ...
    async def get_enrollment(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None: ...
    async def add_enrollment(self, enrollment: Enrollment) -> None: ...
    async def unenroll(self, student_id: UUID, course_id: UUID) -> bool: ...

    async def list_module_progress(
        self,
        *,
        student_id: UUID | None = None,
        course_id: UUID | None = None,
        active_modules_only: bool = True,
        active_courses_only: bool = True,
    ) -> list[ModuleProgress]: ...
    async def get_module_progress(
        self, student_id: UUID, module_id: UUID
    ) -> ModuleProgress | None: ...
    async def upsert_module_progress(
        self,
        student_id: UUID,
        module_id: UUID,
        *,
        completed: bool,
        completed_at: datetime | None,
    ) -> ModuleProgress: ...


class InMemoryProgressRepo:
    def __init__(self, courses: InMemoryCourseRepo) -> None:
        self._courses = courses
        self._enrollments: dict[tuple[UUID, UUID], Enrollment] = {}
        self._progress: dict[tuple[UUID, UUID], ModuleProgress] = {}

    # --- enrollments ---

    async def list_enrollments(
        self,
        *,
        student_id: UUID | None = None,
        course_id: UUID | None = None,
        active_courses_only: bool = True,
    ) -> list[Enrollment]:
        rows = []
        for e in self._enrollments.values():
            if student_id is not None and e.student_id != student_id:
                continue
            if course_id is not None and e.course_id != course_id:
                continue
            if active_courses_only and not await self._course_active(e.course_id):
                continue
            rows.append(e)
        return sorted(rows, key=lambda e: e.enrolled_at, reverse=True)

    async def get_enrollment(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        return self._enrollments.get((student_id, course_id))

    async def add_enrollment(self, enrollment: Enrollment) -> None:
        key = (enrollment.student_id, enrollment.course_id)
        if key in self._enrollments:
            raise ValueError("already enrolled")
        self._enrollments[key] = enrollment

    async def unenroll(self, student_id: UUID, course_id: UUID) -> bool:
        if self._enrollments.pop((student_id, course_id), None) is None:
            return False
        # Every module of the course, inactive ones included.
        module_ids = {
            m.id
            for m in await self._courses.list_modules(course_id, active_only=False)
        }
        for key in [
            k for k in self._progress if k[0] == student_id and k[1] in module_ids
        ]:
            del self._progress[key]
        return True

    # --- module progress ---

    async def list_module_progress(
        self,
        *,
        student_id: UUID | None = None,
        course_id: UUID | None = None,
        active_modules_only: bool = True,
        active_courses_only: bool = True,
    ) -> list[ModuleProgress]:
        rows = []
        for p in self._progress.values():
            if student_id is not None and p.student_id != student_id:
                continue
            module = await self._courses.get_module(p.module_id, active_only=False)
            if module is None:
                continue
            if course_id is not None and module.course_id != course_id:
                continue
            if active_modules_only and not module.is_active:
                continue
            if active_courses_only and not await self._course_active(module.course_id):
                continue
            rows.append(p)
        return rows

    async def get_module_progress(
        self, student_id: UUID, module_id: UUID
    ) -> ModuleProgress | None:
        return self._progress.get((student_id, module_id))

    async def upsert_module_progress(
        self,
        student_id: UUID,
        module_id: UUID,
        *,
        completed: bool,
        completed_at: datetime | None,
    ) -> ModuleProgress:
        key = (student_id, module_id)
        existing = self._progress.get(key)
        if existing is None:
            row = ModuleProgress.new(
                student_id=student_id,
                module_id=module_id,
                completed=completed,
                completed_at=completed_at,
            )
        else:
            row = replace(existing, completed=completed, completed_at=completed_at)
        self._progress[key] = row
        return row

    async def _course_active(self, course_id: UUID) -> bool:
        return await self._courses.get_course(course_id, active_only=True) is not None
