"""Async SQLAlchemy engine and session factory.

When DATABASE_URL is configured the composition root calls
``create_engine_and_session_factory`` once at startup:
- async engine for PostgreSQL via asyncpg
- session factory for request-scoped sessions (one transaction per request)

When DATABASE_URL is None, nothing here is used and the app falls back
to in-memory repositories.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from passport.core.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


def create_engine_and_session_factory(
    database_url: str, *, echo: bool = False
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(
        database_url,
        echo=echo,  # log SQL in dev only
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    logger.info("Database engine created: %s", engine.url.render_as_string())
    return engine, session_factory


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a request-scoped session. Commits on success, rolls back on error."""
    async with session_factory() as session:
        try:
            yield session
            with translate_db_errors():
                await session.commit()
        except Exception:
            await session.rollback()
            raise


@contextmanager
def translate_db_errors(
    conflict_message: str | None = None,
) -> Iterator[None]:
    """Map SQLAlchemy failures onto the service's error taxonomy.

    IntegrityError becomes ConflictError when the caller names the
    conflict (e.g. duplicate email), StorageError otherwise.
    """
    try:
        yield
    except IntegrityError as e:
        if conflict_message is not None:
            raise ConflictError(conflict_message) from e
        logger.error("Integrity violation: %s", e.orig)
        raise StorageError() from e
    except SQLAlchemyError as e:
        logger.error("Database failure: %s", e)
        raise StorageError() from e
