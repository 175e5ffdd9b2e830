"""Tests for schema extensions and composition config."""

from __future__ import annotations

import pytest
from strawberry.extensions import AddValidationRules, QueryDepthLimiter

from modulith.core.settings import GraphQLSettings
from modulith.features.graphql.composers import FieldConfig, ObjectTypeComposer
from modulith.features.graphql.config import CompositionConfig, ResolverConflictPolicy
from modulith.features.graphql.extensions import get_extensions
from modulith.features.graphql.schema_composer import compose_schema
from modulith.features.graphql.wrappers import with_timestamps


@pytest.mark.unit
class TestGetExtensions:
    """Test suite for get_extensions."""

    def test_defaults(self):
        extensions = get_extensions()

        assert len(extensions) == 1
        assert issubclass(extensions[0], QueryDepthLimiter)
        assert extensions[0].options == {"max_depth": 10}

    def test_introspection_disabled_adds_rule(self):
        extensions = get_extensions(GraphQLSettings(introspection_enabled=False))

        assert any(issubclass(ext, AddValidationRules) for ext in extensions[1:])

    def test_returns_classes_built_per_execution(self):
        depth_limiter = get_extensions(GraphQLSettings(max_query_depth=3))[0]

        first, second = depth_limiter(), depth_limiter(execution_context=None)

        assert isinstance(first, QueryDepthLimiter)
        assert first is not second
        assert depth_limiter.__name__ == "QueryDepthLimiter"


@pytest.mark.unit
class TestCompositionConfig:
    """Test suite for CompositionConfig."""

    def test_from_settings(self):
        config = CompositionConfig.from_settings(GraphQLSettings(timestamps_enabled=False, resolver_conflict="first"))

        assert config.type_decorators == []
        assert config.resolver_conflict is ResolverConflictPolicy.FIRST
        assert config.placeholder_field == "health"
        assert "Email" in config.custom_scalars

    def test_overrides_win(self):
        config = CompositionConfig.from_settings(GraphQLSettings(), placeholder_field="ping")

        assert config.placeholder_field == "ping"
        assert config.type_decorators == [with_timestamps]

    def test_explicit_extensions_are_copied(self):
        marker = object()
        config = CompositionConfig(extensions=[marker])

        built = config.build_extensions()

        assert built == [marker]
        assert built is not config.extensions


@pytest.mark.unit
class TestSchemaLimits:
    """Extensions applied to a composed schema."""

    @pytest.fixture
    def nested_schema(self, application, module_context, make_module):
        node_tc = ObjectTypeComposer("Node")
        node_tc.add_fields(
            {
                "name": str,
                "child": FieldConfig(node_tc, resolve=lambda root, info: {"name": "child"}),
            }
        )
        application.load(
            make_module("nodes", resolvers={"Query": {"root": FieldConfig(node_tc, resolve=lambda root, info: {"name": "root"})}})
        )
        return module_context

    async def test_depth_limit_rejects_deep_queries(self, nested_schema):
        nested_schema.graphql_config = CompositionConfig(
            type_decorators=[], settings=GraphQLSettings(max_query_depth=2)
        )
        schema = compose_schema(nested_schema)

        shallow = await schema.execute("{ root { name child { name } } }")
        deep = await schema.execute("{ root { child { child { child { name } } } } }")

        assert shallow.errors is None
        assert deep.errors
        assert "exceeds maximum operation depth" in deep.errors[0].message

    async def test_introspection_can_be_disabled(self, nested_schema):
        nested_schema.graphql_config = CompositionConfig(
            type_decorators=[], settings=GraphQLSettings(introspection_enabled=False)
        )
        schema = compose_schema(nested_schema)

        result = await schema.execute("{ __schema { queryType { name } } }")

        assert result.errors
