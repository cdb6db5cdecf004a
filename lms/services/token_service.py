"""Session JWT creation and validation (HS256).

The signing secret is injected.  The module-level `tokens` instance is
built from SETTINGS.jwt_secret, which config refuses to load without,
so there is no compiled-in fallback key.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from lms.core.config import SETTINGS
from lms.models.user import User

ALGORITHM = "HS256"
ISSUER = "lms-platform"
AUDIENCE = "lms-users"


class TokenService:
    def __init__(self, secret: str, ttl_days: int = 7) -> None:
        if not secret:
            raise ValueError("secret must be non-empty")
        self._secret = secret
        self.ttl = timedelta(days=ttl_days)

    def create_session_token(self, user: User) -> str:
        """Sign a session JWT carrying the user's id, email and role."""
        now = datetime.now(UTC)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "iss": ISSUER,
            "aud": AUDIENCE,
            "exp": now + self.ttl,
            "iat": now,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode_session_token(self, token: str) -> dict:
        """Verify signature and claims, return the payload.

        Pins the algorithm to HS256 so a token cannot pick its own
        (alg:none, or RS/HS confusion).

        Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            issuer=ISSUER,
            audience=AUDIENCE,
            options={"require": ["sub", "exp", "iat", "role"]},
        )


tokens = TokenService(SETTINGS.jwt_secret, SETTINGS.session_ttl_days)
