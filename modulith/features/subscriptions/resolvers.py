"""Root Query and Mutation fields of the subscriptions module."""

from __future__ import annotations

from typing import Any

import strawberry

from modulith.features.graphql.composers import FieldConfig, ListOf
from modulith.features.subscriptions.actions import subscribe_user


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def resolve_plans(root: Any, info: Any) -> list[Any]:
    return list(await info.context.models["Plan"].find_active(info.context.session))


async def resolve_subscription(root: Any, info: Any, id: strawberry.ID) -> Any:  # noqa: A002
    subscription_id = _to_int(id)
    if subscription_id is None:
        return None
    return await info.context.models["Subscription"].get(info.context.session, subscription_id)


async def resolve_subscriptions_by_user(root: Any, info: Any, user_id: strawberry.ID) -> list[Any]:
    value = _to_int(user_id)
    if value is None:
        return []
    return list(await info.context.models["Subscription"].find_many(info.context.session, user_id=value))


async def resolve_subscribe(root: Any, info: Any, user_id: strawberry.ID, plan_id: strawberry.ID) -> Any:
    """Subscribe a user to a plan.

    Raises:
        ValueError: If an id is malformed or the plan is unavailable.
    """
    user, plan = _to_int(user_id), _to_int(plan_id)
    if user is None or plan is None:
        msg = "user_id and plan_id must be numeric IDs"
        raise ValueError(msg)

    session = info.context.session
    models = info.context.models
    subscription = await subscribe_user(
        session,
        models["Plan"],
        models["Subscription"],
        user_id=user,
        plan_id=plan,
    )
    await session.commit()
    return subscription


def build_resolvers(type_composers: dict[str, Any]) -> dict[str, dict[str, FieldConfig]]:
    plan_tc = type_composers["PlanTC"]
    subscription_tc = type_composers["SubscriptionTC"]
    return {
        "Query": {
            "plans": FieldConfig(
                ListOf(plan_tc),
                resolve=resolve_plans,
                description="Active subscription plans",
            ),
            "subscription": FieldConfig(
                subscription_tc,
                resolve=resolve_subscription,
                args={"id": strawberry.ID},
                nullable=True,
                description="Get a subscription by ID",
            ),
            "subscriptions_by_user": FieldConfig(
                ListOf(subscription_tc),
                resolve=resolve_subscriptions_by_user,
                args={"user_id": strawberry.ID},
                description="All subscriptions of a user",
            ),
        },
        "Mutation": {
            "subscribe": FieldConfig(
                subscription_tc,
                resolve=resolve_subscribe,
                args={"user_id": strawberry.ID, "plan_id": strawberry.ID},
                description="Subscribe a user to a plan",
            ),
        },
    }


__all__ = [
    "build_resolvers",
    "resolve_plans",
    "resolve_subscribe",
    "resolve_subscription",
    "resolve_subscriptions_by_user",
]
