from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

Role = Literal["admin", "student"]

ROLE_ADMIN: Role = "admin"
ROLE_STUDENT: Role = "student"


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    password_hash: str
    name: str
    role: Role  # fixed at creation
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_student(self) -> bool:
        return self.role == ROLE_STUDENT

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str,
        role: Role = ROLE_STUDENT,
        phone: str | None = None,
    ) -> User:
        now = datetime.now(UTC)
        return User(
            id=uuid4(),
            email=email,
            password_hash=password_hash,
            name=name,
            role=role,
            phone=phone,
            created_at=now,
            updated_at=now,
        )
