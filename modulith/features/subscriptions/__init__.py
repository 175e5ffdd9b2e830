"""Subscriptions module: plans, user subscriptions and their GraphQL types.

Depends on the users module only at the GraphQL level: ``Subscription.user``
and ``User.subscriptions`` are attached in the relations phase, and skipped
when the users module is not loaded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from modulith.core.modules.descriptor import ModuleDescriptor, ModuleMeta
from modulith.features.subscriptions.actions import ACTIONS, seed_default_plans
from modulith.features.subscriptions.models import Plan, Subscription
from modulith.features.subscriptions.relations import build_relations
from modulith.features.subscriptions.repository import PlanRepository, SubscriptionRepository
from modulith.features.subscriptions.resolvers import build_resolvers
from modulith.features.subscriptions.types import build_type_composers

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext

logger = logging.getLogger(__name__)

MODULE_ID = "subscriptions"


def module(ctx: ModuleContext) -> ModuleDescriptor:
    """Subscriptions module factory."""
    type_composers = build_type_composers()
    resolvers = build_resolvers(type_composers)
    models = {
        "Plan": PlanRepository(Plan),
        "Subscription": SubscriptionRepository(Subscription),
    }

    def on_load() -> None:
        ctx.app.register(
            MODULE_ID,
            models=models,
            type_composers=type_composers,
            resolvers=resolvers,
            actions=ACTIONS,
        )

    async def init(_ctx: ModuleContext, modules: list[ModuleDescriptor]) -> None:
        session_factory = _ctx.extras.get("session_factory")
        if session_factory is None:
            logger.debug("No session factory configured; skipping plan seeding")
            return
        async with session_factory() as session:
            created = await seed_default_plans(session, models["Plan"])
            await session.commit()
        logger.info("Seeded default plans", extra={"count": len(created)})

    return ModuleDescriptor(
        id=MODULE_ID,
        meta=ModuleMeta(
            version="1.0.0",
            description="Manages subscription plans and user subscriptions",
            depends_on=["users"],
        ),
        models=models,
        type_composers=type_composers,
        resolvers=resolvers,
        actions=dict(ACTIONS),
        relations=build_relations(type_composers),
        init=init,
        on_load=on_load,
    )


__all__ = ["MODULE_ID", "Plan", "PlanRepository", "Subscription", "SubscriptionRepository", "module"]
