from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID

from lms.models.course import Course, Module


class CourseRepo(Protocol):
    async def list_courses(self, *, active_only: bool = True) -> list[Course]: ...
    async def get_course(
        self, course_id: UUID, *, active_only: bool = True
    ) -> Course | None: ...
    async def add_course(self, course: Course) -> None: ...
    async def update_course(self, course_id: UUID, **fields: Any) -> Course | None: ...
    async def deactivate_course(self, course_id: UUID) -> bool: ...

    async def list_modules(
        self, course_id: UUID | None = None, *, active_only: bool = True
    ) -> list[Module]: ...
    async def get_module(
        self, module_id: UUID, *, active_only: bool = True
    ) -> Module | None: ...
    async def add_module(self, module: Module) -> None: ...
    async def update_module(self, module_id: UUID, **fields: Any) -> Module | None: ...
    async def deactivate_module(self, module_id: UUID) -> bool: ...
    async def reorder_modules(self, course_id: UUID, module_ids: list[UUID]) -> None: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._modules: dict[UUID, Module] = {}

    # --- courses ---

    async def list_courses(self, *, active_only: bool = True) -> list[Course]:
        courses = [c for c in self._courses.values() if c.is_active or not active_only]
        # Newest first
        return sorted(courses, key=_created_key, reverse=True)

    async def get_course(
        self, course_id: UUID, *, active_only: bool = True
    ) -> Course | None:
        c = self._courses.get(course_id)
        if c is None or (active_only and not c.is_active):
            return None
        return c

    async def add_course(self, course: Course) -> None:
        if course.id in self._courses:
            raise ValueError("course already exists")
        self._courses[course.id] = course

    async def update_course(self, course_id: UUID, **fields: Any) -> Course | None:
        c = self._courses.get(course_id)
        if c is None or not c.is_active:
            return None
        updated = replace(c, **fields, updated_at=datetime.now(UTC))
        self._courses[course_id] = updated
        return updated

    async def deactivate_course(self, course_id: UUID) -> bool:
        c = self._courses.get(course_id)
        if c is None or not c.is_active:
            return False
        self._courses[course_id] = replace(
            c, is_active=False, updated_at=datetime.now(UTC)
        )
        return True

    # --- modules ---

    async def list_modules(
        self, course_id: UUID | None = None, *, active_only: bool = True
    ) -> list[Module]:
        modules = [
            m
            for m in self._modules.values()
            if (course_id is None or m.course_id == course_id)
            and (m.is_active or not active_only)
        ]
        return sorted(modules, key=lambda m: (str(m.course_id), m.order_index))

    async def get_module(
        self, module_id: UUID, *, active_only: bool = True
    ) -> Module | None:
        m = self._modules.get(module_id)
        if m is None or (active_only and not m.is_active):
            return None
        return m

    async def add_module(self, module: Module) -> None:
        if module.course_id not in self._courses:
            raise ValueError("course does not exist")
        self._modules[module.id] = module

    async def update_module(self, module_id: UUID, **fields: Any) -> Module | None:
        m = self._modules.get(module_id)
        if m is None or not m.is_active:
            return None
        updated = replace(m, **fields, updated_at=datetime.now(UTC))
        self._modules[module_id] = updated
        return updated

    async def deactivate_module(self, module_id: UUID) -> bool:
        m = self._modules.get(module_id)
        if m is None or not m.is_active:
            return False
        self._modules[module_id] = replace(
            m, is_active=False, updated_at=datetime.now(UTC)
        )
        return True

    async def reorder_modules(self, course_id: UUID, module_ids: list[UUID]) -> None:
        now = datetime.now(UTC)
        for index, module_id in enumerate(module_ids):
            m = self._modules.get(module_id)
            if m is None or m.course_id != course_id:
                raise KeyError(f"module {module_id} not in course {course_id}")
            self._modules[module_id] = replace(m, order_index=index, updated_at=now)


def _created_key(course: Course) -> datetime:
    return course.created_at or datetime.min.replace(tzinfo=UTC)
