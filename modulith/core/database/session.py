"""Async engine and session factory.

The sample modules keep their tables on ``Base.metadata``; ``init_models``
creates whatever tables the loaded modules declared.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from modulith.core.database.base import Base

if TYPE_CHECKING:
    from modulith.core.settings.database import DatabaseSettings

logger = logging.getLogger(__name__)


def create_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create an async engine from ``DatabaseSettings`` (cached settings by default)."""
    if settings is None:
        from modulith.core.settings import get_db_settings

        settings = get_db_settings()
    if settings.url.startswith("sqlite") and ":memory:" in settings.url:
        # One shared connection, otherwise every pooled connection sees its own empty database
        return create_async_engine(settings.url, echo=settings.echo, poolclass=StaticPool)
    return create_async_engine(settings.url, echo=settings.echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with ``expire_on_commit=False`` so rows stay readable after commit."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create every table registered on ``Base.metadata``."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created", extra={"tables": sorted(Base.metadata.tables)})


__all__ = ["create_engine", "create_session_factory", "init_models"]
