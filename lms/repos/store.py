"""The entity store: the repositories the services read and write.

Same switch as engine.py: with DATABASE_URL configured the Pg repos are
used, otherwise in-memory repos (local dev and tests).  Routes receive the
store through the get_store dependency so tests can swap it.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lms.db.engine import async_session_factory
from lms.repos.announcement_repo import AnnouncementRepo, InMemoryAnnouncementRepo
from lms.repos.course_repo import CourseRepo, InMemoryCourseRepo
from lms.repos.pg_announcement_repo import PgAnnouncementRepo
from lms.repos.pg_course_repo import PgCourseRepo
from lms.repos.pg_progress_repo import PgProgressRepo
from lms.repos.pg_user_repo import PgUserRepo
from lms.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from lms.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True, slots=True)
class Store:
    users: UserRepo
    courses: CourseRepo
    progress: ProgressRepo
    announcements: AnnouncementRepo


def in_memory_store() -> Store:
    courses = InMemoryCourseRepo()
    return Store(
        users=InMemoryUserRepo(),
        courses=courses,
        progress=InMemoryProgressRepo(courses),
        announcements=InMemoryAnnouncementRepo(),
    )


def pg_store(session_factory: async_sessionmaker[AsyncSession]) -> Store:
    return Store(
        users=PgUserRepo(session_factory),
        courses=PgCourseRepo(session_factory),
        progress=PgProgressRepo(session_factory),
        announcements=PgAnnouncementRepo(session_factory),
    )


if async_session_factory is not None:
    store = pg_store(async_session_factory)
else:
    store = in_memory_store()


def get_store() -> Store:
    """FastAPI dependency returning the process-wide store."""
    return store
