from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest
from argon2 import PasswordHasher

from lms.core.errors import ConflictError, InvalidInputError, NotFoundError
from lms.models.user import ROLE_ADMIN, ROLE_STUDENT, User
from lms.repos.user_repo import InMemoryUserRepo
from lms.services import auth_service
from lms.services.auth_service import (
    _PASSWORD_ALPHABET,
    authenticate_user,
    generate_password,
    hash_password,
    verify_password,
)


def test_authenticate_user_rehashes_when_needed() -> None:
    # A deliberately weak Argon2 configuration.
    old_ph = PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1)
    password = "pw123456"
    old_hash = old_ph.hash(password)

    repo = InMemoryUserRepo()
    u = User.new(email="tee@example.com", password_hash=old_hash, name="Tee")
    asyncio.run(repo.add(u))

    authed = asyncio.run(authenticate_user(repo, "tee@example.com", password))
    assert authed is not None

    stored = asyncio.run(repo.get_by_email("tee@example.com"))
    assert stored is not None
    assert stored.password_hash != old_hash
    assert verify_password(password, stored.password_hash)


def test_authenticate_user_is_case_insensitive_on_email() -> None:
    repo = InMemoryUserRepo()
    asyncio.run(
        repo.add(
            User.new(
                email="kim@example.com",
                password_hash=hash_password("secret1"),
                name="Kim",
            )
        )
    )
    assert asyncio.run(authenticate_user(repo, "  KIM@Example.com ", "secret1"))


def test_authenticate_user_unknown_and_wrong_password_both_none() -> None:
    repo = InMemoryUserRepo()
    asyncio.run(
        repo.add(
            User.new(
                email="kim@example.com",
                password_hash=hash_password("secret1"),
                name="Kim",
            )
        )
    )
    assert asyncio.run(authenticate_user(repo, "nobody@example.com", "secret1")) is None
    assert asyncio.run(authenticate_user(repo, "kim@example.com", "wrong!!")) is None


def test_verify_password_rejects_garbage_hash() -> None:
    assert verify_password("anything", "not-an-argon2-hash") is False
    assert verify_password("", hash_password("x")) is False


def test_generate_password_uses_unambiguous_alphabet() -> None:
    for _ in range(50):
        pw = generate_password()
        assert len(pw) == 8
        assert set(pw) <= set(_PASSWORD_ALPHABET)
    assert not set("0O1lI") & set(_PASSWORD_ALPHABET)


# ---- validation ----


@pytest.mark.parametrize("email", ["", "no-at-sign", "a@b", "two words@example.com"])
def test_normalize_email_rejects(email: str) -> None:
    with pytest.raises(InvalidInputError, match="valid email"):
        auth_service.normalize_email(email)


def test_normalize_email_lowercases_and_strips() -> None:
    assert auth_service.normalize_email("  Ann@Example.COM ") == "ann@example.com"


def test_validate_password_and_name() -> None:
    with pytest.raises(InvalidInputError, match="at least 6"):
        auth_service.validate_password("12345")
    assert auth_service.validate_password("123456") == "123456"
    with pytest.raises(InvalidInputError, match="at least 2"):
        auth_service.validate_name(" A ")
    assert auth_service.validate_name("  Al ") == "Al"


# ---- account operations ----


def test_create_user_without_password_returns_generated_one() -> None:
    repo = InMemoryUserRepo()
    user, generated = asyncio.run(
        auth_service.create_user(repo, email="New@Example.com", name="Newbie")
    )
    assert user.email == "new@example.com"
    assert user.role == ROLE_STUDENT
    assert generated is not None
    assert verify_password(generated, user.password_hash)


def test_create_user_with_password_returns_none_for_generated() -> None:
    repo = InMemoryUserRepo()
    user, generated = asyncio.run(
        auth_service.create_user(
            repo,
            email="boss@example.com",
            name="Boss",
            password="sekret1",
            role=ROLE_ADMIN,
        )
    )
    assert generated is None
    assert user.is_admin


def test_create_user_duplicate_email_conflicts() -> None:
    repo = InMemoryUserRepo()
    asyncio.run(
        auth_service.register_student(
            repo, email="dup@example.com", password="secret1", name="Dup"
        )
    )
    with pytest.raises(ConflictError, match="already exists"):
        asyncio.run(
            auth_service.register_student(
                repo, email="DUP@example.com", password="secret1", name="Dup"
            )
        )


def test_update_profile_conflict_and_missing() -> None:
    repo = InMemoryUserRepo()
    a = asyncio.run(
        auth_service.register_student(
            repo, email="a@example.com", password="secret1", name="Ann"
        )
    )
    asyncio.run(
        auth_service.register_student(
            repo, email="b@example.com", password="secret1", name="Ben"
        )
    )

    with pytest.raises(ConflictError):
        asyncio.run(
            auth_service.update_profile(repo, a.id, name="Ann", email="b@example.com")
        )

    updated = asyncio.run(
        auth_service.update_profile(
            repo, a.id, name="Annie", email="annie@example.com", phone=" 555 "
        )
    )
    assert updated.name == "Annie"
    assert updated.phone == "555"

    with pytest.raises(NotFoundError):
        asyncio.run(
            auth_service.update_profile(
                repo, uuid4(), name="Xx", email="x@example.com"
            )
        )


def test_change_password_requires_current_password() -> None:
    repo = InMemoryUserRepo()
    u = asyncio.run(
        auth_service.register_student(
            repo, email="c@example.com", password="oldpass", name="Cat"
        )
    )
    with pytest.raises(InvalidInputError, match="Current password is incorrect"):
        asyncio.run(auth_service.change_password(repo, u.id, "nope!!", "newpass"))

    asyncio.run(auth_service.change_password(repo, u.id, "oldpass", "newpass"))
    assert asyncio.run(authenticate_user(repo, "c@example.com", "newpass"))
    assert asyncio.run(authenticate_user(repo, "c@example.com", "oldpass")) is None


def test_reset_password_replaces_hash() -> None:
    repo = InMemoryUserRepo()
    u = asyncio.run(
        auth_service.register_student(
            repo, email="r@example.com", password="oldpass", name="Rae"
        )
    )
    new_password = asyncio.run(auth_service.reset_password(repo, u.id))

    assert asyncio.run(authenticate_user(repo, "r@example.com", new_password))
    assert asyncio.run(authenticate_user(repo, "r@example.com", "oldpass")) is None
