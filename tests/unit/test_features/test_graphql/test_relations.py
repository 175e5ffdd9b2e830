"""Tests for relation field builders."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from modulith.features.graphql.composers import FieldConfig, ListOf, ObjectTypeComposer
from modulith.features.graphql.context import GraphQLContext
from modulith.features.graphql.relations import belongs_to, has_many, isolated


def _info(**models):
    return SimpleNamespace(context=GraphQLContext(session=MagicMock(name="session"), models=models))


@pytest.mark.unit
class TestIsolated:
    """Test suite for isolated."""

    async def test_passes_through_result(self):
        wrapped = isolated(lambda root, info: 42)

        assert await wrapped(None, None) == 42

    async def test_awaits_async_resolvers(self):
        async def resolve(root, info, limit):
            return limit * 2

        assert await isolated(resolve)(None, None, limit=4) == 8

    async def test_failure_returns_copy_of_default(self, caplog):
        def resolve(root, info):
            raise RuntimeError("db down")

        default: list = []
        wrapped = isolated(resolve, default, name="subscriptions")

        result = await wrapped(None, None)

        assert result == []
        assert result is not default
        assert "Relation resolver subscriptions failed" in caplog.text


@pytest.mark.unit
class TestHasMany:
    """Test suite for has_many."""

    def test_field_config_shape(self):
        target = ObjectTypeComposer("Subscription")
        config = has_many(target, model="Subscription", foreign_key="user_id", description="Subs")

        assert isinstance(config, FieldConfig)
        assert isinstance(config.type, ListOf)
        assert config.type.inner is target
        assert config.description == "Subs"

    async def test_queries_by_foreign_key(self):
        handle = MagicMock()
        handle.find_many = AsyncMock(return_value=("s1", "s2"))
        info = _info(Subscription=handle)
        config = has_many("SubscriptionTC", model="Subscription", foreign_key="user_id")

        result = await config.resolve({"id": 7}, info)

        assert result == ["s1", "s2"]
        handle.find_many.assert_awaited_once_with(info.context.session, user_id=7)

    async def test_missing_local_key_returns_empty(self):
        config = has_many("SubscriptionTC", model="Subscription", foreign_key="user_id")

        assert await config.resolve({}, _info()) == []

    async def test_missing_model_handle_degrades(self, caplog):
        config = has_many("SubscriptionTC", model="Subscription", foreign_key="user_id")

        assert await config.resolve({"id": 1}, _info()) == []
        assert "not available in the request context" in caplog.text


@pytest.mark.unit
class TestBelongsTo:
    """Test suite for belongs_to."""

    def test_field_is_nullable(self):
        config = belongs_to("UserTC", model="User", local_key="user_id")

        assert config.nullable is True
        assert config.type == "UserTC"

    async def test_queries_by_local_key(self):
        handle = MagicMock()
        handle.find_one = AsyncMock(return_value="user")
        info = _info(User=handle)
        config = belongs_to("UserTC", model="User", local_key="user_id")

        result = await config.resolve(SimpleNamespace(user_id=3), info)

        assert result == "user"
        handle.find_one.assert_awaited_once_with(info.context.session, id=3)

    async def test_lookup_failure_returns_none(self):
        handle = MagicMock()
        handle.find_one = AsyncMock(side_effect=RuntimeError("boom"))
        config = belongs_to("UserTC", model="User", local_key="user_id")

        assert await config.resolve({"user_id": 3}, _info(User=handle)) is None
