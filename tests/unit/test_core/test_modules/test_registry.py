"""Tests for the asset registry."""

from __future__ import annotations

import pytest

from modulith.core.exceptions import RegistrationError
from modulith.core.modules.registry import AssetRegistry, MergeStrategy, merge_bucket


@pytest.mark.unit
class TestMergeBucket:
    """Test suite for merge_bucket."""

    def test_merge_unions_keys_incoming_wins(self):
        result = merge_bucket({"a": 1, "b": 2}, {"b": 3, "c": 4}, MergeStrategy.MERGE)

        assert result == {"a": 1, "b": 3, "c": 4}

    def test_replace_discards_existing(self):
        result = merge_bucket({"a": 1}, {"b": 2}, MergeStrategy.REPLACE)

        assert result == {"b": 2}

    def test_auto_replaces_non_mappings(self):
        assert merge_bucket([1], [2], MergeStrategy.AUTO) == [2]
        assert merge_bucket({"a": 1}, "scalar", MergeStrategy.AUTO) == "scalar"

    def test_first_value_is_copied(self):
        incoming = {"a": 1}
        result = merge_bucket(None, incoming, MergeStrategy.MERGE)

        assert result == incoming
        assert result is not incoming


@pytest.mark.unit
class TestAssetRegistry:
    """Test suite for AssetRegistry."""

    def test_register_creates_record_with_id(self):
        registry = AssetRegistry()

        record = registry.register("users", models={"User": "handle"})

        assert record == {"id": "users", "models": {"User": "handle"}}
        assert registry.has_module("users")
        assert "users" in registry
        assert len(registry) == 1

    def test_register_merges_buckets(self):
        registry = AssetRegistry()

        registry.register("users", models={"User": 1}, services={"mailer": "m"})
        registry.register("users", models={"Profile": 2})

        record = registry.get_module("users")
        assert record["models"] == {"User": 1, "Profile": 2}
        assert record["services"] == {"mailer": "m"}

    def test_register_ignores_id_bucket(self):
        registry = AssetRegistry()

        record = registry.register("users", id="other")

        assert record["id"] == "users"

    def test_register_uses_custom_strategy(self):
        registry = AssetRegistry(strategies={"resolvers": MergeStrategy.REPLACE})

        registry.register("users", resolvers={"Query": {"a": 1}})
        registry.register("users", resolvers={"Mutation": {"b": 2}})

        assert registry.get_module("users")["resolvers"] == {"Mutation": {"b": 2}}

    def test_unknown_bucket_uses_auto(self):
        registry = AssetRegistry()

        assert registry.strategy_for("widgets") is MergeStrategy.AUTO
        assert registry.strategy_for("models") is MergeStrategy.MERGE

    @pytest.mark.parametrize("module_id", ["", "  ", None, 7])
    def test_register_rejects_invalid_id(self, module_id):
        registry = AssetRegistry()

        with pytest.raises(RegistrationError):
            registry.register(module_id, models={})  # type: ignore[arg-type]
        assert len(registry) == 0

    def test_get_missing_module_returns_none(self):
        assert AssetRegistry().get_module("nope") is None

    def test_collect_folds_bucket_in_registration_order(self):
        registry = AssetRegistry()
        registry.register("users", models={"User": 1})
        registry.register("audit")
        registry.register("billing", models={"Invoice": 2})

        assert list(registry.collect("models")) == ["users", "billing"]
        assert registry.get_models() == {"users": {"User": 1}, "billing": {"Invoice": 2}}

    def test_collect_restricted_to_ids(self):
        registry = AssetRegistry()
        registry.register("users", actions={"a": 1})
        registry.register("billing", actions={"b": 2})

        assert registry.collect("actions", ["billing"]) == {"billing": {"b": 2}}

    def test_get_all_assets(self):
        registry = AssetRegistry()
        registry.register("users")
        registry.register("billing")

        assert [record["id"] for record in registry.get_all_assets()] == ["users", "billing"]
        assert registry.module_ids() == ["users", "billing"]
