from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from lms.models.user import ROLE_ADMIN, User
from lms.services.token_service import ALGORITHM, AUDIENCE, ISSUER, TokenService

SECRET = "unit-test-secret-0123456789abcdefghij"


def _user() -> User:
    return User.new(
        email="ada@example.com", password_hash="x", name="Ada", role=ROLE_ADMIN
    )


def test_round_trip_claims() -> None:
    svc = TokenService(SECRET)
    user = _user()
    claims = svc.decode_session_token(svc.create_session_token(user))

    assert claims["sub"] == str(user.id)
    assert claims["email"] == "ada@example.com"
    assert claims["role"] == ROLE_ADMIN
    assert claims["iss"] == ISSUER
    assert claims["aud"] == AUDIENCE
    assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())


def test_wrong_secret_rejected() -> None:
    token = TokenService(SECRET).create_session_token(_user())
    with pytest.raises(jwt.InvalidSignatureError):
        TokenService(SECRET + "-other").decode_session_token(token)


def test_expired_token_rejected() -> None:
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "x",
            "role": "student",
            "iss": ISSUER,
            "aud": AUDIENCE,
            "iat": now - timedelta(days=8),
            "exp": now - timedelta(days=1),
        },
        SECRET,
        algorithm=ALGORITHM,
    )
    with pytest.raises(jwt.ExpiredSignatureError):
        TokenService(SECRET).decode_session_token(token)


def test_missing_role_claim_rejected() -> None:
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "x",
            "iss": ISSUER,
            "aud": AUDIENCE,
            "iat": now,
            "exp": now + timedelta(hours=1),
        },
        SECRET,
        algorithm=ALGORITHM,
    )
    with pytest.raises(jwt.MissingRequiredClaimError):
        TokenService(SECRET).decode_session_token(token)


def test_unsigned_token_rejected() -> None:
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "x",
            "role": "admin",
            "iss": ISSUER,
            "aud": AUDIENCE,
            "iat": now,
            "exp": now + timedelta(hours=1),
        },
        None,
        algorithm="none",
    )
    with pytest.raises(jwt.InvalidTokenError):
        TokenService(SECRET).decode_session_token(token)


def test_empty_secret_refused() -> None:
    with pytest.raises(ValueError):
        TokenService("")
