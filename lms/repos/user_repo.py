from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from lms.models.user import User


class UserRepo(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def add(self, user: User) -> None: ...
    async def list_by_role(self, role: str) -> list[User]: ...
    async def count_by_role(self, role: str) -> int: ...
    async def update_profile(
        self, user_id: UUID, *, name: str, email: str, phone: str | None
    ) -> User | None: ...
    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        for u in self._by_id.values():
            if u.email == email:
                return u
        return None

    async def add(self, user: User) -> None:
        if await self.get_by_email(user.email) is not None:
            raise ValueError("email already exists")
        self._by_id[user.id] = user

    async def list_by_role(self, role: str) -> list[User]:
        users = [u for u in self._by_id.values() if u.role == role]
        return sorted(users, key=lambda u: u.name)

    async def count_by_role(self, role: str) -> int:
        return sum(1 for u in self._by_id.values() if u.role == role)

    async def update_profile(
        self, user_id: UUID, *, name: str, email: str, phone: str | None
    ) -> User | None:
        u = self._by_id.get(user_id)
        if u is None:
            return None
        existing = await self.get_by_email(email)
        if existing is not None and existing.id != user_id:
            raise ValueError("email already exists")

        updated = replace(
            u, name=name, email=email, phone=phone, updated_at=datetime.now(UTC)
        )
        self._by_id[user_id] = updated
        return updated

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        u = self._by_id.get(user_id)
        if u is None:
            raise KeyError("user not found")
        self._by_id[user_id] = replace(
            u, password_hash=password_hash, updated_at=datetime.now(UTC)
        )
