from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity resolved from the session cookie.

    Carried through the request via FastAPI's dependency system.  The
    role is re-read from the user store on every request, so a token
    can never grant a role the account no longer has.
    """

    user_id: UUID
    email: str
    name: str
    role: str

    def has_role(self, role: str) -> bool:
        return self.role == role
