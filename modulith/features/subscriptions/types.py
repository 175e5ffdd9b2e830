"""GraphQL type composers of the subscriptions module."""

from __future__ import annotations

from datetime import datetime

import strawberry

from modulith.features.graphql.composers import (
    EnumTypeComposer,
    FieldConfig,
    ListOf,
    ObjectTypeComposer,
    TypeComposer,
)
from modulith.features.subscriptions.models import BillingCycle, SubscriptionStatus


def build_type_composers() -> dict[str, TypeComposer]:
    """Create plan, subscription and enum composers for one module instance."""
    billing_cycle_tc = EnumTypeComposer.from_enum(
        BillingCycle, name="BillingCycle", description="How often a plan is billed"
    )
    status_tc = EnumTypeComposer.from_enum(
        SubscriptionStatus, name="SubscriptionStatus", description="Lifecycle status of a subscription"
    )
    plan_tc = ObjectTypeComposer(
        "Plan",
        description="Subscription plan",
        fields={
            "id": strawberry.ID,
            "code": str,
            "name": str,
            "price": float,
            "billing_cycle": billing_cycle_tc,
            "features": ListOf(str),
            "tier": int,
            "is_active": bool,
        },
    )
    subscription_tc = ObjectTypeComposer(
        "Subscription",
        description="A user's subscription to a plan",
        fields={
            "id": strawberry.ID,
            "user_id": strawberry.ID,
            "plan_id": strawberry.ID,
            "status": status_tc,
            "start_date": datetime,
            "end_date": FieldConfig(datetime, nullable=True),
        },
    )
    return {
        "PlanTC": plan_tc,
        "SubscriptionTC": subscription_tc,
        "SubscriptionStatusTC": status_tc,
        "BillingCycleTC": billing_cycle_tc,
    }


__all__ = ["build_type_composers"]
