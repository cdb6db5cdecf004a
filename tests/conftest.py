from __future__ import annotations

import os

# Settings are read once at import time: pin the environment before any
# lms module is imported.  Empty URLs force the in-memory store and the
# in-memory rate limiter.
#
# POSTGRES_TEST_URL keeps the caller's DATABASE_URL for the tests marked
# `postgres`, which build their own engine against it.
POSTGRES_TEST_URL = os.environ.get("DATABASE_URL", "")
os.environ["APP_ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret-0123456789abcdefghijklmnopqrstuvwxyz"
os.environ["DATABASE_URL"] = ""
os.environ["REDIS_URL"] = ""
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)
os.environ.pop("BOOTSTRAP_ADMIN_PASSWORD", None)

import asyncio  # noqa: E402
from collections.abc import Iterator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from lms.api.ratelimit import rate_limiter  # noqa: E402
from lms.core.config import SETTINGS  # noqa: E402
from lms.main import app  # noqa: E402
from lms.models.course import Course, Module  # noqa: E402
from lms.models.progress import Enrollment, ModuleProgress  # noqa: E402
from lms.models.user import ROLE_ADMIN, ROLE_STUDENT, User  # noqa: E402
from lms.repos.store import Store, get_store, in_memory_store  # noqa: E402
from lms.services.auth_service import hash_password  # noqa: E402
from lms.services.rate_limiter import InMemoryRateLimiter  # noqa: E402
from lms.services.token_service import tokens  # noqa: E402

DEFAULT_PASSWORD = "password123"


class Seeder:
    """Synchronous helpers that write straight to a store's repos.

    Bypasses the services, so tests can build states the services would
    refuse (progress without an enrollment, rows on inactive modules).
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    def user(
        self,
        *,
        name: str = "Sam Student",
        email: str | None = None,
        role: str = ROLE_STUDENT,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User.new(
            email=email or f"{uuid4().hex[:10]}@example.com",
            password_hash=hash_password(password),
            name=name,
            role=role,  # type: ignore[arg-type]
        )
        asyncio.run(self.store.users.add(user))
        return user

    def student(self, **kwargs) -> User:
        return self.user(role=ROLE_STUDENT, **kwargs)

    def admin(self, **kwargs) -> User:
        kwargs.setdefault("name", "Ada Admin")
        return self.user(role=ROLE_ADMIN, **kwargs)

    def course(self, title: str = "Intro Course") -> Course:
        course = Course.new(title=title, description=f"{title} description")
        asyncio.run(self.store.courses.add_course(course))
        return course

    def module(self, course: Course, title: str | None = None) -> Module:
        existing = asyncio.run(
            self.store.courses.list_modules(course.id, active_only=False)
        )
        module = Module.new(
            course_id=course.id,
            title=title or f"Module {len(existing) + 1}",
            video_url=f"https://www.youtube.com/watch?v=vid{len(existing)}",
            order_index=len(existing),
        )
        asyncio.run(self.store.courses.add_module(module))
        return module

    def modules(self, course: Course, count: int) -> list[Module]:
        return [self.module(course) for _ in range(count)]

    def enroll(self, student: User, course: Course) -> Enrollment:
        enrollment = Enrollment.new(student_id=student.id, course_id=course.id)
        asyncio.run(self.store.progress.add_enrollment(enrollment))
        return enrollment

    def complete(
        self,
        student: User,
        module: Module,
        *,
        completed: bool = True,
        at: datetime | None = None,
    ) -> ModuleProgress:
        return asyncio.run(
            self.store.progress.upsert_module_progress(
                student.id,
                module.id,
                completed=completed,
                completed_at=(at or datetime.now(UTC)) if completed else None,
            )
        )

    def deactivate_module(self, module: Module) -> None:
        asyncio.run(self.store.courses.deactivate_module(module.id))

    def deactivate_course(self, course: Course) -> None:
        asyncio.run(self.store.courses.deactivate_course(course.id))


@pytest.fixture
def store() -> Iterator[Store]:
    """A fresh in-memory store, also served to every route."""
    fresh = in_memory_store()
    app.dependency_overrides[get_store] = lambda: fresh
    yield fresh
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def seed(store: Store) -> Seeder:
    return Seeder(store)


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if isinstance(rate_limiter, InMemoryRateLimiter):
        rate_limiter.clear()


def session_cookies(user: User) -> dict[str, str]:
    return {SETTINGS.session_cookie_name: tokens.create_session_token(user)}


@pytest.fixture
def client(store: Store) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin(seed: Seeder) -> User:
    return seed.admin(email="admin@example.com")


@pytest.fixture
def student(seed: Seeder) -> User:
    return seed.student(name="Sam Student", email="sam@example.com")


@pytest.fixture
def admin_client(store: Store, admin: User) -> TestClient:
    return TestClient(app, cookies=session_cookies(admin))


@pytest.fixture
def student_client(store: Store, student: User) -> TestClient:
    return TestClient(app, cookies=session_cookies(student))


@pytest.fixture
def client_for(store: Store):
    """Factory: a TestClient signed in as the given user."""

    def _make(user: User) -> TestClient:
        return TestClient(app, cookies=session_cookies(user))

    return _make
