"""Subscription business actions.

Registered in the module's ``actions`` bucket; resolvers and other modules
call them with an explicit session and the repositories to use.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import logging
from typing import TYPE_CHECKING, Any

from modulith.features.subscriptions.models import BillingCycle, Plan, Subscription, SubscriptionStatus

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from modulith.features.subscriptions.repository import PlanRepository, SubscriptionRepository

logger = logging.getLogger(__name__)

CYCLE_LENGTH: dict[BillingCycle, timedelta | None] = {
    BillingCycle.MONTHLY: timedelta(days=30),
    BillingCycle.QUARTERLY: timedelta(days=90),
    BillingCycle.ANNUAL: timedelta(days=365),
    BillingCycle.LIFETIME: None,
}

DEFAULT_PLANS: tuple[dict[str, Any], ...] = (
    {
        "code": "free",
        "name": "Free",
        "price": 0.0,
        "billing_cycle": BillingCycle.MONTHLY,
        "features": ["5 journals", "50 entries per journal", "Basic analytics"],
        "tier": 0,
    },
    {
        "code": "basic",
        "name": "Basic",
        "price": 4.99,
        "billing_cycle": BillingCycle.MONTHLY,
        "features": ["10 journals", "200 entries per journal", "Advanced analytics", "Priority support"],
        "tier": 1,
    },
    {
        "code": "premium",
        "name": "Premium",
        "price": 9.99,
        "billing_cycle": BillingCycle.MONTHLY,
        "features": ["Unlimited journals", "Unlimited entries", "AI-powered insights", "Premium support"],
        "tier": 2,
    },
)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def compute_end_date(start: datetime, cycle: BillingCycle) -> datetime | None:
    length = CYCLE_LENGTH[BillingCycle(cycle)]
    return None if length is None else start + length


def is_subscription_active(subscription: Any, now: datetime | None = None) -> bool:
    """Active status and not past its end date (lifetime subscriptions never end)."""
    status = getattr(subscription, "status", None)
    if status != SubscriptionStatus.ACTIVE:
        return False
    end_date = getattr(subscription, "end_date", None)
    if end_date is None:
        return True
    return (now or datetime.now(UTC)) < _aware(end_date)


def remaining_days(subscription: Any, now: datetime | None = None) -> int:
    """Whole days left before the subscription ends (0 when inactive)."""
    if not is_subscription_active(subscription, now):
        return 0
    end_date = getattr(subscription, "end_date", None)
    if end_date is None:
        return 0
    delta = _aware(end_date) - (now or datetime.now(UTC))
    return max(0, delta.days + (1 if delta.seconds or delta.microseconds else 0))


async def subscribe_user(
    session: AsyncSession,
    plans: PlanRepository,
    subscriptions: SubscriptionRepository,
    *,
    user_id: int,
    plan_id: int,
) -> Subscription:
    """Create an active subscription for ``user_id`` on ``plan_id``.

    Raises:
        ValueError: If the plan does not exist or is inactive.
    """
    plan = await plans.get(session, plan_id)
    if plan is None or not plan.is_active:
        msg = f"Plan {plan_id} does not exist or is not available"
        raise ValueError(msg)

    start = datetime.now(UTC)
    subscription = await subscriptions.create(
        session,
        Subscription(
            user_id=user_id,
            plan_id=plan.id,
            status=SubscriptionStatus.ACTIVE,
            start_date=start,
            end_date=compute_end_date(start, plan.billing_cycle),
        ),
    )
    logger.info("User subscribed", extra={"user_id": user_id, "plan_id": plan.id})
    return subscription


async def cancel_subscription(session: AsyncSession, subscriptions: SubscriptionRepository, subscription_id: int) -> Subscription | None:
    subscription = await subscriptions.get(session, subscription_id)
    if subscription is None:
        return None
    subscription.status = SubscriptionStatus.CANCELED
    await session.flush()
    return subscription


async def seed_default_plans(session: AsyncSession, plans: PlanRepository) -> list[Plan]:
    """Create the default plans that do not exist yet; returns the ones created."""
    created: list[Plan] = []
    for data in DEFAULT_PLANS:
        if await plans.find_by_code(session, data["code"]) is not None:
            continue
        created.append(await plans.create(session, Plan(**data)))
    return created


ACTIONS = {
    "subscribe": subscribe_user,
    "cancel": cancel_subscription,
    "seed_default_plans": seed_default_plans,
}

__all__ = [
    "ACTIONS",
    "DEFAULT_PLANS",
    "cancel_subscription",
    "compute_end_date",
    "is_subscription_active",
    "remaining_days",
    "seed_default_plans",
    "subscribe_user",
]
