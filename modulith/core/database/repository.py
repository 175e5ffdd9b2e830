"""Minimal generic repository for SQLAlchemy models.

Repositories are the model handles modules publish in their ``models``
bucket. Relation resolvers only rely on ``find_many`` / ``find_one``, so any
object with those two coroutines can stand in for a repository.

Example:
    class UserRepository(BaseRepository[User]):
        async def find_by_email(self, session: AsyncSession, email: str) -> User | None:
            return await self.get_by(session, User.email, email)

    users = UserRepository(User)
    user = await users.get(session, 1)
    subscriptions = await subscription_repo.find_many(session, user_id=user.id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute


class BaseRepository[T]:
    """Minimal generic repository for CRUD operations.

    Provides:
        - get(session, id) -> T | None
        - get_by(session, attr, value) -> T | None
        - list(session, limit, offset) -> Sequence[T]
        - find_many(session, **filters) -> Sequence[T]
        - find_one(session, **filters) -> T | None
        - create(session, instance) -> T

    Session is always explicit - no hidden state.
    """

    __slots__ = ("_logger", "model")

    def __init__(self, model: type[T]) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., User, Plan)
        """
        self.model = model
        self._logger = logging.getLogger(f"repository.{model.__name__}")

    async def get(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        """Get entity by primary key.

        Returns:
            Entity if found, None otherwise
        """
        instance = await session.get(self.model, id)
        self._logger.debug(
            "db.get: %s(%s) -> %s",
            self.model.__name__,
            id,
            "found" if instance else "not found",
        )
        return instance

    async def get_by(
        self,
        session: AsyncSession,
        attr: InstrumentedAttribute[Any],
        value: Any,
    ) -> T | None:
        """Get entity by arbitrary attribute.

        Example:
            user = await repo.get_by(session, User.email, "john@example.com")
        """
        stmt = select(self.model).where(attr == value)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list(
        self,
        session: AsyncSession,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[T]:
        """List entities with pagination, ordered by primary key."""
        stmt = select(self.model).order_by(*self.model.__mapper__.primary_key).limit(limit).offset(offset)  # type: ignore[attr-defined]
        result = await session.execute(stmt)
        items = result.scalars().all()
        self._logger.debug(
            "db.list: %s(limit=%d, offset=%d) -> %d items",
            self.model.__name__,
            limit,
            offset,
            len(items),
        )
        return items

    def _filtered(self, filters: dict[str, Any]) -> Any:
        stmt = select(self.model)
        for name, value in filters.items():
            column = getattr(self.model, name, None)
            if column is None:
                msg = f"{self.model.__name__} has no attribute '{name}'"
                raise AttributeError(msg)
            stmt = stmt.where(column == value)
        return stmt.order_by(*self.model.__mapper__.primary_key)  # type: ignore[attr-defined]

    async def find_many(self, session: AsyncSession, **filters: Any) -> Sequence[T]:
        """All entities whose attributes equal the given values.

        Example:
            subs = await repo.find_many(session, user_id=1)
        """
        result = await session.execute(self._filtered(filters))
        return result.scalars().all()

    async def find_one(self, session: AsyncSession, **filters: Any) -> T | None:
        """First entity whose attributes equal the given values."""
        result = await session.execute(self._filtered(filters).limit(1))
        return result.scalars().first()

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Persist a new entity.

        Adds to session, flushes to get generated values (like id),
        and refreshes to ensure instance is up-to-date.
        """
        session.add(instance)
        await session.flush()
        await session.refresh(instance)

        self._logger.debug("db.create: %s(id=%s)", self.model.__name__, getattr(instance, "id", None))
        return instance


__all__ = ["BaseRepository"]
