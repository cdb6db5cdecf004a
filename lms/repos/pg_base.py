"""Session handling shared by the PostgreSQL repos.

Each operation borrows its own session from the factory.  An AsyncSession
cannot run two statements at once, and the progress aggregator issues its
reads concurrently, so one-session-per-request would serialize (or break)
those reads.

Database failures leave here as DataAccessError, logged once with the
operation name and identifiers.  Constraint violations that callers need
to react to (duplicate email, duplicate enrollment) are re-raised as
ValueError, matching the in-memory repos.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lms.core.errors import DataAccessError

logger = logging.getLogger(__name__)


class PgRepoBase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _read(self, operation: str, **context: object) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            logger.exception("Read failed  op=%s context=%s", operation, context)
            raise DataAccessError(operation) from e

    @asynccontextmanager
    async def _write(self, operation: str, **context: object) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except IntegrityError as e:
            logger.warning("Constraint violation  op=%s context=%s", operation, context)
            raise ValueError(f"{operation}: constraint violation") from e
        except SQLAlchemyError as e:
            logger.exception("Write failed  op=%s context=%s", operation, context)
            raise DataAccessError(operation) from e
