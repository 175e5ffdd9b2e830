"""GraphQL schema composition.

Modules describe their types with mutable composers; ``compose_schema`` turns
everything the loaded modules registered into one strawberry schema.

Usage:
    from modulith.features.graphql import ObjectTypeComposer, FieldConfig, compose_schema

    UserTC = ObjectTypeComposer("User", fields={"id": strawberry.ID, "email": "Email"})
    ...
    schema = compose_schema(ctx)
"""

from modulith.features.graphql.composers import (
    ArgConfig,
    EnumTypeComposer,
    FieldConfig,
    InputTypeComposer,
    ListOf,
    ObjectTypeComposer,
    ScalarTypeComposer,
    TypeComposer,
    TypeKind,
)
from modulith.features.graphql.config import CompositionConfig, ResolverConflictPolicy
from modulith.features.graphql.context import GraphQLContext
from modulith.features.graphql.namespace import SchemaNamespace, TypeCollision
from modulith.features.graphql.relations import belongs_to, has_many, isolated
from modulith.features.graphql.schema_composer import compose_schema
from modulith.features.graphql.type_resolver import LookupStrategy, TypeResolver
from modulith.features.graphql.wrappers import with_timestamps

__all__ = [
    "ArgConfig",
    "CompositionConfig",
    "EnumTypeComposer",
    "FieldConfig",
    "GraphQLContext",
    "InputTypeComposer",
    "ListOf",
    "LookupStrategy",
    "ObjectTypeComposer",
    "ResolverConflictPolicy",
    "ScalarTypeComposer",
    "SchemaNamespace",
    "TypeCollision",
    "TypeComposer",
    "TypeKind",
    "TypeResolver",
    "belongs_to",
    "compose_schema",
    "has_many",
    "isolated",
    "with_timestamps",
]
