"""Cross-module fields contributed by the subscriptions module.

Runs in the post-load phase, when every module is loaded regardless of order.
Fields on this module's own types are always added; fields on ``User`` are
added only when the users module's composer can be found, otherwise the
relation is skipped with a warning.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from modulith.features.graphql.composers import FieldConfig
from modulith.features.graphql.relations import belongs_to, has_many, isolated
from modulith.features.graphql.type_resolver import TypeResolver
from modulith.features.graphql.utils import resolve_attribute
from modulith.features.subscriptions.actions import is_subscription_active, remaining_days

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext
    from modulith.core.modules.descriptor import ModuleDescriptor

logger = logging.getLogger(__name__)

USERS_MODULE = "users"


def _is_active(root: Any, info: Any) -> bool:
    return is_subscription_active(root)


def _remaining_days(root: Any, info: Any) -> int:
    return remaining_days(root)


async def _active_subscription(root: Any, info: Any) -> Any:
    user_id = resolve_attribute(root, "id")
    if user_id is None:
        return None
    return await info.context.models["Subscription"].find_active_for_user(info.context.session, user_id)


def build_relations(type_composers: dict[str, Any]):
    """Relations callback bound to this module instance's composers."""

    def relations(ctx: ModuleContext, modules: list[ModuleDescriptor]) -> None:
        plan_tc = type_composers["PlanTC"]
        subscription_tc = type_composers["SubscriptionTC"]

        subscription_tc.add_relation(
            "plan",
            belongs_to(plan_tc, model="Plan", local_key="plan_id", description="The plan of this subscription"),
        )
        subscription_tc.add_relation(
            "is_active",
            FieldConfig(bool, resolve=_is_active, description="Whether the subscription is currently active"),
        )
        subscription_tc.add_relation(
            "remaining_days",
            FieldConfig(int, resolve=_remaining_days, description="Days left in the subscription"),
        )

        user_tc = TypeResolver.default(ctx).resolve("UserTC", module_id=USERS_MODULE)
        if user_tc is None:
            logger.warning("User type not available; skipping user relations")
            return

        subscription_tc.add_relation(
            "user",
            belongs_to(user_tc, model="User", local_key="user_id", description="The subscribed user"),
        )
        user_tc.add_relation(
            "subscriptions",
            has_many(subscription_tc, model="Subscription", foreign_key="user_id", description="All subscriptions for this user"),
        )
        user_tc.add_relation(
            "active_subscription",
            FieldConfig(
                subscription_tc,
                resolve=isolated(_active_subscription, None, name="active_subscription"),
                nullable=True,
                description="The active subscription for this user",
            ),
        )
        logger.debug("Subscription relations attached to %s", user_tc.name)

    return relations


__all__ = ["build_relations"]
