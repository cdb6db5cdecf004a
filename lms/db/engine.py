"""Async SQLAlchemy engine and session factory.

When DATABASE_URL is configured, provides:
- an async engine for PostgreSQL via asyncpg
- an async session factory; the Pg repos open one short-lived session
  per operation so independent reads can run concurrently
- a FastAPI lifespan hook for startup/shutdown

When DATABASE_URL is None, engine and async_session_factory are None
and the app runs on the in-memory repositories.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from lms.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


if SETTINGS.database_url:
    engine = create_async_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,  # log SQL in dev only
        pool_size=5,
        # Aggregations fan out up to five reads per request.
        max_overflow=15,
        pool_pre_ping=True,
    )
    async_session_factory: async_sessionmaker[AsyncSession] | None = (
        async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    )
else:
    engine = None
    async_session_factory = None


@asynccontextmanager
async def lifespan_db():
    """Startup/shutdown hook for the database engine."""
    if engine is None:
        logger.info("No DATABASE_URL configured, using in-memory repositories")
        yield
        return

    logger.info(
        "Database engine created: %s",
        engine.url.render_as_string(hide_password=True),
    )
    yield
    await engine.dispose()
    logger.info("Database engine disposed")
