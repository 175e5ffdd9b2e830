"""Tests for GraphQL query resolvers of the bundled modules."""

from __future__ import annotations

import pytest

USER_QUERY = """
query User($id: ID!) {
    user(id: $id) {
        id
        username
        fullName
        subscriptions {
            status
            plan { code }
        }
        activeSubscription {
            id
        }
    }
}
"""

USERS_QUERY = """
query Users($limit: Int! = 50, $offset: Int! = 0) {
    users(limit: $limit, offset: $offset) {
        username
    }
}
"""

CREATE_USER = """
mutation($data: CreateUserInput!) {
    createUser(data: $data) { id }
}
"""

SUBSCRIBE = """
mutation($u: ID!, $p: ID!) {
    subscribe(userId: $u, planId: $p) { id }
}
"""

SUBSCRIPTIONS_BY_USER_QUERY = """
query SubscriptionsByUser($userId: ID!) {
    subscriptionsByUser(userId: $userId) {
        id
        userId
        status
    }
}
"""


@pytest.mark.integration
async def test_plans_query_returns_seeded_plans(plan_ids, execute) -> None:
    """Test that the default plans seeded during init are exposed."""
    result = await execute("{ plans { code price billingCycle features tier } }")

    assert result.errors is None
    plans = result.data["plans"]
    assert [p["code"] for p in plans] == ["free", "basic", "premium"]
    assert plans[0]["billingCycle"] == "MONTHLY"
    assert plans[1]["price"] == 4.99
    assert "Priority support" in plans[1]["features"]
    assert set(plan_ids) == {"free", "basic", "premium"}


@pytest.mark.integration
async def test_user_query_returns_user(sample_user, execute) -> None:
    """Test that user query returns a single user by ID."""
    result = await execute(USER_QUERY, id=sample_user["id"])

    assert result.errors is None
    user = result.data["user"]
    assert user["username"] == "ada"
    assert user["fullName"] == "Ada"
    assert user["subscriptions"] == []
    assert user["activeSubscription"] is None


@pytest.mark.integration
@pytest.mark.parametrize("user_id", ["999", "not-a-number"])
async def test_user_query_returns_none(user_id, execute) -> None:
    """Test that user query returns None for unknown or invalid IDs."""
    result = await execute(USER_QUERY, id=user_id)

    assert result.errors is None
    assert result.data["user"] is None


@pytest.mark.integration
async def test_users_query_is_paginated(execute) -> None:
    """Test that users query honours limit and offset."""
    for name in ("ada", "bob", "cyd"):
        created = await execute(CREATE_USER, data={"username": name, "email": f"{name}@example.com"})
        assert created.errors is None

    result = await execute(USERS_QUERY, limit=2, offset=1)

    assert result.errors is None
    assert [u["username"] for u in result.data["users"]] == ["bob", "cyd"]


@pytest.mark.integration
async def test_user_subscriptions_relation(sample_user, plan_ids, execute) -> None:
    """Test that User.subscriptions resolves rows owned by the subscriptions module."""
    subscribed = await execute(
        SUBSCRIBE,
        u=sample_user["id"],
        p=plan_ids["premium"],
    )
    assert subscribed.errors is None

    result = await execute(USER_QUERY, id=sample_user["id"])

    assert result.errors is None
    user = result.data["user"]
    assert user["subscriptions"] == [{"status": "ACTIVE", "plan": {"code": "premium"}}]
    assert user["activeSubscription"] == {"id": subscribed.data["subscribe"]["id"]}


@pytest.mark.integration
async def test_subscriptions_by_user(sample_user, plan_ids, execute) -> None:
    """Test listing subscriptions by user id."""
    await execute(
        SUBSCRIBE,
        u=sample_user["id"],
        p=plan_ids["free"],
    )

    result = await execute(SUBSCRIPTIONS_BY_USER_QUERY, userId=sample_user["id"])
    empty = await execute(SUBSCRIPTIONS_BY_USER_QUERY, userId="bogus")

    assert result.errors is None
    assert [s["userId"] for s in result.data["subscriptionsByUser"]] == [sample_user["id"]]
    assert empty.data == {"subscriptionsByUser": []}


@pytest.mark.integration
async def test_subscription_query_returns_none_for_missing(execute) -> None:
    """Test that subscription query returns None for a missing row."""
    result = await execute("{ subscription(id: 404) { id } }")

    assert result.errors is None
    assert result.data["subscription"] is None
