"""GraphQL composition configuration.

``CompositionConfig`` bundles everything ``compose_schema`` needs besides the
modules themselves: custom scalars, type decorators, global relation
callbacks, the root-field conflict policy and the schema extensions. It is
usually built from ``GraphQLSettings`` and stored on ``ctx.graphql_config``.

Usage:
    # In .env file
    GRAPHQL_TIMESTAMPS_ENABLED=false
    GRAPHQL_RESOLVER_CONFLICT=error

    # In code
    ctx.graphql_config = CompositionConfig.from_settings()
    schema = compose_schema(ctx)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from modulith.features.graphql.extensions import get_extensions
from modulith.features.graphql.types.scalars import DEFAULT_SCALARS
from modulith.features.graphql.wrappers import with_timestamps

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext
    from modulith.core.settings.graphql import GraphQLSettings
    from modulith.features.graphql.composers import ObjectTypeComposer
    from modulith.features.graphql.namespace import SchemaNamespace

TypeDecorator = Callable[["ObjectTypeComposer"], None]
GlobalRelation = Callable[["SchemaNamespace", "ModuleContext"], None]


class ResolverConflictPolicy(StrEnum):
    """How same-named root fields contributed by two modules are settled."""

    FIRST = "first"
    """The earlier module keeps the field."""

    LAST = "last"
    """The later module overwrites the field (iteration order)."""

    ERROR = "error"
    """Composition fails with ``ResolverConflictError``."""


@dataclass
class CompositionConfig:
    """Schema composition configuration.

    Attributes:
        custom_scalars: Scalar name -> strawberry scalar, installed first.
        type_decorators: Applied to every non-root object composer.
        global_relations: ``(namespace, ctx)`` callbacks run after module
            types are installed; failures are logged and skipped.
        resolver_conflict: Root-field conflict policy.
        placeholder_field: Query field added when no module contributes one.
        settings: Settings used to build the default extensions.
        extensions: Explicit extension list; overrides ``settings``.
    """

    custom_scalars: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_SCALARS))
    type_decorators: list[TypeDecorator] = field(default_factory=lambda: [with_timestamps])
    global_relations: list[GlobalRelation] = field(default_factory=list)
    resolver_conflict: ResolverConflictPolicy = ResolverConflictPolicy.LAST
    placeholder_field: str = "health"
    settings: GraphQLSettings | None = None
    extensions: list[Any] | None = None

    def __post_init__(self) -> None:
        self.resolver_conflict = ResolverConflictPolicy(self.resolver_conflict)

    @classmethod
    def from_settings(cls, settings: GraphQLSettings | None = None, **overrides: Any) -> CompositionConfig:
        """Build a config from ``GraphQLSettings`` (cached settings by default).

        Args:
            settings: Settings instance; ``get_graphql_settings()`` when omitted.
            **overrides: Field values that take precedence over settings.
        """
        if settings is None:
            from modulith.core.settings import get_graphql_settings

            settings = get_graphql_settings()

        values: dict[str, Any] = {
            "type_decorators": [with_timestamps] if settings.timestamps_enabled else [],
            "resolver_conflict": ResolverConflictPolicy(settings.resolver_conflict),
            "placeholder_field": settings.placeholder_field,
            "settings": settings,
        }
        values.update(overrides)
        return cls(**values)

    def build_extensions(self) -> list[Any]:
        """Fresh extension list for a new schema."""
        if self.extensions is not None:
            return list(self.extensions)
        return get_extensions(self.settings)


__all__ = [
    "CompositionConfig",
    "GlobalRelation",
    "ResolverConflictPolicy",
    "TypeDecorator",
]
