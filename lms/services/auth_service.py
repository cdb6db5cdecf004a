from __future__ import annotations

import logging
import re
import secrets
from uuid import UUID

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from lms.core.errors import ConflictError, InvalidInputError, NotFoundError
from lms.models.user import ROLE_STUDENT, Role, User
from lms.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

# Argon2 hash strings encode parameters + salt
_ph = PasswordHasher()

MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# No 0/O, 1/l/I: temporary passwords get read aloud and retyped.
_PASSWORD_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789"
GENERATED_PASSWORD_LENGTH = 8


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise InvalidInputError("Please enter a valid email address")
    return email


def validate_password(password: str) -> str:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return password


def validate_name(name: str) -> str:
    name = (name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        raise InvalidInputError(
            f"Name must be at least {MIN_NAME_LENGTH} characters long"
        )
    return name


# ---------------------------------------------------------------------------
# Account operations
# ---------------------------------------------------------------------------


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    """Return the user for valid credentials, None otherwise.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    user = await repo.get_by_email((email or "").strip().lower())
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None

    # Upgrade the stored hash if the hasher's parameters changed.
    if _ph.check_needs_rehash(user.password_hash):
        await repo.update_password_hash(user.id, _ph.hash(password))
        logger.info("Rehashed password for user=%s", user.id)

    return user


async def create_user(
    repo: UserRepo,
    *,
    email: str,
    name: str,
    password: str | None = None,
    role: Role = ROLE_STUDENT,
    phone: str | None = None,
) -> tuple[User, str | None]:
    """Create an account.

    When no password is supplied a temporary one is generated and
    returned alongside the user so it can be handed over once; otherwise
    the second element is None.
    """
    email = normalize_email(email)
    name = validate_name(name)
    generated: str | None = None
    if password is None:
        generated = password = generate_password()
    else:
        validate_password(password)

    if await repo.get_by_email(email) is not None:
        logger.warning("Rejected duplicate email=%s", email)
        raise ConflictError("An account with this email already exists")

    user = User.new(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        phone=(phone or "").strip() or None,
    )
    try:
        await repo.add(user)
    except ValueError as exc:
        raise ConflictError("An account with this email already exists") from exc

    logger.info("Created user id=%s role=%s", user.id, user.role)
    return user, generated


async def register_student(
    repo: UserRepo, *, email: str, password: str, name: str
) -> User:
    """Self-service signup.  Always creates a student."""
    user, _ = await create_user(
        repo, email=email, name=name, password=password, role=ROLE_STUDENT
    )
    return user


async def update_profile(
    repo: UserRepo,
    user_id: UUID,
    *,
    name: str,
    email: str,
    phone: str | None = None,
) -> User:
    email = normalize_email(email)
    name = validate_name(name)
    try:
        user = await repo.update_profile(
            user_id, name=name, email=email, phone=(phone or "").strip() or None
        )
    except ValueError as exc:
        raise ConflictError("An account with this email already exists") from exc
    if user is None:
        raise NotFoundError("User not found")
    return user


async def change_password(
    repo: UserRepo, user_id: UUID, current_password: str, new_password: str
) -> None:
    validate_password(new_password)
    user = await repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(current_password, user.password_hash):
        raise InvalidInputError("Current password is incorrect")
    await repo.update_password_hash(user_id, hash_password(new_password))
    logger.info("Password changed for user=%s", user_id)


async def reset_password(repo: UserRepo, user_id: UUID) -> str:
    """Replace the password with a generated one and return it."""
    if await repo.get_by_id(user_id) is None:
        raise NotFoundError("User not found")
    password = generate_password()
    await repo.update_password_hash(user_id, hash_password(password))
    logger.info("Password reset for user=%s", user_id)
    return password
