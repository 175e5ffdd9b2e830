"""User repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modulith.core.database import BaseRepository
from modulith.features.users.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class UserRepository(BaseRepository[User]):
    """User-specific queries beyond basic CRUD."""

    async def find_by_email(self, session: AsyncSession, email: str) -> User | None:
        return await self.get_by(session, User.email, email.lower())

    async def find_by_username(self, session: AsyncSession, username: str) -> User | None:
        return await self.get_by(session, User.username, username)


__all__ = ["UserRepository"]
