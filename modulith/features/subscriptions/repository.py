"""Plan and subscription repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from modulith.core.database import BaseRepository
from modulith.features.subscriptions.models import Plan, Subscription, SubscriptionStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class PlanRepository(BaseRepository[Plan]):
    async def find_active(self, session: AsyncSession) -> Sequence[Plan]:
        """Active plans ordered by tier, then price."""
        stmt = select(Plan).where(Plan.is_active.is_(True)).order_by(Plan.tier, Plan.price)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def find_by_code(self, session: AsyncSession, code: str) -> Plan | None:
        return await self.get_by(session, Plan.code, code)


class SubscriptionRepository(BaseRepository[Subscription]):
    async def find_active_for_user(self, session: AsyncSession, user_id: int) -> Subscription | None:
        """Most recently started active subscription of a user."""
        stmt = (
            select(Subscription)
            .where(Subscription.user_id == user_id, Subscription.status == SubscriptionStatus.ACTIVE)
            .order_by(Subscription.start_date.desc(), Subscription.id.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()


__all__ = ["PlanRepository", "SubscriptionRepository"]
