"""Tests for the schema namespace."""

from __future__ import annotations

import pytest

from modulith.features.graphql.composers import EnumTypeComposer, InputTypeComposer, ObjectTypeComposer
from modulith.features.graphql.namespace import MUTATION, QUERY, SchemaNamespace


@pytest.mark.unit
class TestSchemaNamespace:
    """Test suite for SchemaNamespace."""

    def test_starts_with_query_only(self):
        namespace = SchemaNamespace()

        assert namespace.query.name == QUERY
        assert namespace.mutation is None
        assert len(namespace) == 0

    def test_first_writer_wins_on_key(self):
        namespace = SchemaNamespace()
        first = ObjectTypeComposer("User")
        second = ObjectTypeComposer("User")

        assert namespace.add("UserTC", first, "users") is True
        assert namespace.add("UserTC", second, "accounts") is False

        assert namespace.get("UserTC") is first
        assert namespace.owner("UserTC") == "users"
        collision = namespace.collisions[0]
        assert (collision.name, collision.kept_module, collision.dropped_module) == ("UserTC", "users", "accounts")

    def test_same_graphql_name_under_another_key_collides(self):
        namespace = SchemaNamespace()
        namespace.add("UserTC", ObjectTypeComposer("User"), "users")

        assert namespace.add("AccountTC", ObjectTypeComposer("User"), "accounts") is False
        assert namespace.collisions[0].kept_module == "users"
        assert "AccountTC" not in namespace

    def test_same_composer_is_an_alias(self):
        namespace = SchemaNamespace()
        user_tc = ObjectTypeComposer("User")

        assert namespace.add("UserTC", user_tc, "users")
        assert namespace.add("UserTC", user_tc, "users")
        assert namespace.add("User", user_tc, "users")

        assert namespace.collisions == []
        assert namespace.keys() == ["UserTC", "User"]
        assert namespace.composers() == [user_tc]

    @pytest.mark.parametrize("name", [QUERY, MUTATION])
    def test_root_names_are_reserved(self, name):
        namespace = SchemaNamespace()

        assert namespace.add(f"{name}TC", ObjectTypeComposer(name), "rogue") is False
        assert namespace.collisions[0].kept_module == "<root>"

    def test_find_by_type_name(self):
        namespace = SchemaNamespace()
        plan_tc = ObjectTypeComposer("Plan")
        namespace.add("PlanTC", plan_tc)

        assert namespace.find("Plan") is plan_tc
        assert namespace.find(QUERY) is namespace.query
        assert namespace.find("Missing") is None

    def test_object_types_filters_kinds(self):
        namespace = SchemaNamespace()
        user_tc = ObjectTypeComposer("User")
        namespace.add("UserTC", user_tc)
        namespace.add("CycleTC", EnumTypeComposer("Cycle", ["MONTHLY"]))
        namespace.add("InputTC", InputTypeComposer("CreateUserInput"))
        mutation = namespace.get_or_create_mutation()

        assert namespace.object_types() == [user_tc]
        assert namespace.object_types(include_roots=True) == [namespace.query, mutation, user_tc]

    def test_get_or_create_mutation_is_stable(self):
        namespace = SchemaNamespace()

        assert namespace.get_or_create_mutation() is namespace.get_or_create_mutation()

    def test_reset_clears_everything(self):
        namespace = SchemaNamespace()
        old_query = namespace.query
        namespace.add("UserTC", ObjectTypeComposer("User"))
        namespace.add("UserTC", ObjectTypeComposer("User"))
        namespace.resolvers["users"] = {"Query": {}}
        namespace.get_or_create_mutation()

        namespace.reset()

        assert len(namespace) == 0
        assert namespace.collisions == []
        assert namespace.resolvers == {}
        assert namespace.mutation is None
        assert namespace.query is not old_query
        assert list(namespace) == []
