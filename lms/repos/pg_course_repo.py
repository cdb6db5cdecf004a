"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update

from lms.db.tables import CourseRow, ModuleRow
from lms.models.course import Course, Module
from lms.repos.pg_base import PgRepoBase


class PgCourseRepo(PgRepoBase):
    """Satisfies the CourseRepo Protocol using PostgreSQL via SQLAlchemy."""

    # --- courses ---

    async def list_courses(self, *, active_only: bool = True) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at.desc())
        if active_only:
            stmt = stmt.where(CourseRow.is_active.is_(True))
        async with self._read("list_courses") as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def get_course(
        self, course_id: UUID, *, active_only: bool = True
    ) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.id == course_id)
        if active_only:
            stmt = stmt.where(CourseRow.is_active.is_(True))
        async with self._read("get_course", course_id=course_id) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_course(row) if row is not None else None

    async def add_course(self, course: Course) -> None:
        async with self._write("add_course", course_id=course.id) as session:
            session.add(
                CourseRow(
                    id=course.id,
                    title=course.title,
                    description=course.description,
                    thumbnail_url=course.thumbnail_url,
                    created_by=course.created_by,
                    is_active=course.is_active,
                    created_at=course.created_at,
                    updated_at=course.updated_at,
                )
            )

    async def update_course(self, course_id: UUID, **fields: Any) -> Course | None:
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course_id, CourseRow.is_active.is_(True))
            .values(**fields, updated_at=func.now())
            .returning(CourseRow)
        )
        async with self._write("update_course", course_id=course_id) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _row_to_course(row) if row is not None else None

    async def deactivate_course(self, course_id: UUID) -> bool:
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course_id, CourseRow.is_active.is_(True))
            .values(is_active=False, updated_at=func.now())
        )
        async with self._write("deactivate_course", course_id=course_id) as session:
            result = await session.execute(stmt)
            return result.rowcount > 0

    # --- modules ---

    async def list_modules(
        self, course_id: UUID | None = None, *, active_only: bool = True
    ) -> list[Module]:
        stmt = select(ModuleRow).order_by(ModuleRow.course_id, ModuleRow.order_index)
        if course_id is not None:
            stmt = stmt.where(ModuleRow.course_id == course_id)
        if active_only:
            stmt = stmt.where(ModuleRow.is_active.is_(True))
        async with self._read("list_modules", course_id=course_id) as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_module(r) for r in rows]

    async def get_module(
        self, module_id: UUID, *, active_only: bool = True
    ) -> Module | None:
        stmt = select(ModuleRow).where(ModuleRow.id == module_id)
        if active_only:
            stmt = stmt.where(ModuleRow.is_active.is_(True))
        async with self._read("get_module", module_id=module_id) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_module(row) if row is not None else None

    async def add_module(self, module: Module) -> None:
        async with self._write(
            "add_module", module_id=module.id, course_id=module.course_id
        ) as session:
            session.add(
                ModuleRow(
                    id=module.id,
                    course_id=module.course_id,
                    title=module.title,
                    description=module.description,
                    video_url=module.video_url,
                    order_index=module.order_index,
                    duration_minutes=module.duration_minutes,
                    is_active=module.is_active,
                    created_at=module.created_at,
                    updated_at=module.updated_at,
                )
            )

    async def update_module(self, module_id: UUID, **fields: Any) -> Module | None:
        stmt = (
            update(ModuleRow)
            .where(ModuleRow.id == module_id, ModuleRow.is_active.is_(True))
            .values(**fields, updated_at=func.now())
            .returning(ModuleRow)
        )
        async with self._write("update_module", module_id=module_id) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _row_to_module(row) if row is not None else None

    async def deactivate_module(self, module_id: UUID) -> bool:
        stmt = (
            update(ModuleRow)
            .where(ModuleRow.id == module_id, ModuleRow.is_active.is_(True))
            .values(is_active=False, updated_at=func.now())
        )
        async with self._write("deactivate_module", module_id=module_id) as session:
            result = await session.execute(stmt)
            return result.rowcount > 0

    async def reorder_modules(self, course_id: UUID, module_ids: list[UUID]) -> None:
        # One transaction: a half-applied reorder would leave duplicate indexes.
        async with self._write("reorder_modules", course_id=course_id) as session:
            for index, module_id in enumerate(module_ids):
                result = await session.execute(
                    update(ModuleRow)
                    .where(ModuleRow.id == module_id, ModuleRow.course_id == course_id)
                    .values(order_index=index, updated_at=func.now())
                )
                if result.rowcount == 0:
                    raise KeyError(f"module {module_id} not in course {course_id}")


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        description=row.description,
        thumbnail_url=row.thumbnail_url,
        created_by=row.created_by,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_module(row: ModuleRow) -> Module:
    return Module(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        video_url=row.video_url,
        order_index=row.order_index,
        description=row.description,
        duration_minutes=row.duration_minutes,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
