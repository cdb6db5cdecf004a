"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update

from lms.db.tables import UserRow
from lms.models.user import User
from lms.repos.pg_base import PgRepoBase


class PgUserRepo(PgRepoBase):
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    async def get_by_id(self, user_id: UUID) -> User | None:
        async with self._read("get_user", user_id=user_id) as session:
            stmt = select(UserRow).where(UserRow.id == user_id)
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def get_by_email(self, email: str) -> User | None:
        async with self._read("get_user_by_email") as session:
            stmt = select(UserRow).where(UserRow.email == email)
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def add(self, user: User) -> None:
        async with self._write("add_user", user_id=user.id) as session:
            session.add(
                UserRow(
                    id=user.id,
                    email=user.email,
                    password_hash=user.password_hash,
                    name=user.name,
                    phone=user.phone,
                    role=user.role,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                )
            )

    async def list_by_role(self, role: str) -> list[User]:
        async with self._read("list_users_by_role", role=role) as session:
            stmt = select(UserRow).where(UserRow.role == role).order_by(UserRow.name)
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def count_by_role(self, role: str) -> int:
        async with self._read("count_users_by_role", role=role) as session:
            stmt = select(func.count()).select_from(UserRow).where(UserRow.role == role)
            return (await session.execute(stmt)).scalar_one()

    async def update_profile(
        self, user_id: UUID, *, name: str, email: str, phone: str | None
    ) -> User | None:
        async with self._write("update_user_profile", user_id=user_id) as session:
            stmt = (
                update(UserRow)
                .where(UserRow.id == user_id)
                .values(name=name, email=email, phone=phone, updated_at=func.now())
                .returning(UserRow)
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _row_to_user(row) if row is not None else None

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        async with self._write("update_password_hash", user_id=user_id) as session:
            stmt = (
                update(UserRow)
                .where(UserRow.id == user_id)
                .values(password_hash=password_hash, updated_at=func.now())
            )
            await session.execute(stmt)


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name,
        role=row.role,  # type: ignore[arg-type]
        phone=row.phone,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
