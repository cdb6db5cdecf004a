"""PostgreSQL implementation of ProgressRepo."""

from __future__ import annotations

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert

from lms.db.tables import CourseRow, EnrollmentRow, ModuleProgressRow, ModuleRow
from lms.models.progress import Enrollment, ModuleProgress
from lms.repos.pg_base import PgRepoBase


class PgProgressRepo(PgRepoBase):
    """Satisfies the ProgressRepo Protocol using PostgreSQL via SQLAlchemy."""

    # --- enrollments ---

    async def list_enrollments(
        self,
        *,
        student_id: UUID | None = None,
        course_id: UUID | None = None,
        active_courses_only: bool = True,
    ) -> list[Enrollment]:
        stmt = select(EnrollmentRow).order_by(EnrollmentRow.enrolled_at.desc())
        if student_id is not None:
            stmt = stmt.where(EnrollmentRow.student_id == student_id)
        if course_id is not None:
            stmt = stmt.where(EnrollmentRow.course_id == course_id)
        if active_courses_only:
            stmt = stmt.join(CourseRow, CourseRow.id == EnrollmentRow.course_id).where(
                CourseRow.is_active.is_(True)
            )
        async with self._read(
            "list_enrollments", student_id=student_id, course_id=course_id
        ) as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]

    async def get_enrollment(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.student_id == student_id,
            EnrollmentRow.course_id == course_id,
        )
        async with self._read(
            "get_enrollment", student_id=student_id, course_id=course_id
        ) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_enrollment(row) if row is not None else None

    async def add_enrollment(self, enrollment: Enrollment) -> None:
        async with self._write(
            "add_enrollment",
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
        ) as session:
            session.add(
                EnrollmentRow(
                    id=enrollment.id,
                    student_id=enrollment.student_id,
                    course_id=enrollment.course_id,
                    enrolled_at=enrollment.enrolled_at,
                    completed_at=enrollment.completed_at,
                    progress_percentage=enrollment.progress_percentage,
                )
            )

    async def unenroll(self, student_id: UUID, course_id: UUID) -> bool:
        async with self._write(
            "unenroll", student_id=student_id, course_id=course_id
        ) as session:
            result = await session.execute(
                delete(EnrollmentRow).where(
                    EnrollmentRow.student_id == student_id,
                    EnrollmentRow.course_id == course_id,
                )
            )
            if result.rowcount == 0:
                return False
            # Every module of the course, inactive ones included.
            course_modules = select(ModuleRow.id).where(ModuleRow.course_id == course_id)
            await session.execute(
                delete(ModuleProgressRow).where(
                    ModuleProgressRow.student_id == student_id,
                    ModuleProgressRow.module_id.in_(course_modules),
                )
            )
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
        stmt = select(ModuleProgressRow).join(
            ModuleRow, ModuleRow.id == ModuleProgressRow.module_id
        )
        if student_id is not None:
            stmt = stmt.where(ModuleProgressRow.student_id == student_id)
        if course_id is not None:
            stmt = stmt.where(ModuleRow.course_id == course_id)
        if active_modules_only:
            stmt = stmt.where(ModuleRow.is_active.is_(True))
        if active_courses_only:
            stmt = stmt.join(CourseRow, CourseRow.id == ModuleRow.course_id).where(
                CourseRow.is_active.is_(True)
            )
        async with self._read(
            "list_module_progress", student_id=student_id, course_id=course_id
        ) as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_progress(r) for r in rows]

    async def get_module_progress(
        self, student_id: UUID, module_id: UUID
    ) -> ModuleProgress | None:
        stmt = select(ModuleProgressRow).where(
            ModuleProgressRow.student_id == student_id,
            ModuleProgressRow.module_id == module_id,
        )
        async with self._read(
            "get_module_progress", student_id=student_id, module_id=module_id
        ) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_progress(row) if row is not None else None

    async def upsert_module_progress(
        self,
        student_id: UUID,
        module_id: UUID,
        *,
        completed: bool,
        completed_at: datetime | None,
    ) -> ModuleProgress:
        stmt = insert(ModuleProgressRow).values(
            id=uuid.uuid4(),
            student_id=student_id,
            module_id=module_id,
            completed=completed,
            completed_at=completed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ModuleProgressRow.student_id, ModuleProgressRow.module_id],
            set_={
                "completed": stmt.excluded.completed,
                "completed_at": stmt.excluded.completed_at,
            },
        ).returning(ModuleProgressRow)
        async with self._write(
            "upsert_module_progress", student_id=student_id, module_id=module_id
        ) as session:
            row = (await session.execute(stmt)).scalar_one()
            return _row_to_progress(row)


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        id=row.id,
        student_id=row.student_id,
        course_id=row.course_id,
        enrolled_at=row.enrolled_at,
        completed_at=row.completed_at,
        progress_percentage=row.progress_percentage,
    )


def _row_to_progress(row: ModuleProgressRow) -> ModuleProgress:
    return ModuleProgress(
        id=row.id,
        student_id=row.student_id,
        module_id=row.module_id,
        completed=row.completed,
        completed_at=row.completed_at,
        created_at=row.created_at,
    )
