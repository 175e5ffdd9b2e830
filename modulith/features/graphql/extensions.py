"""Strawberry extensions for the composed schema.

Provides:
- Query depth limiting (configurable, default max depth=10)
- Introspection blocking when disabled in settings

Extensions are returned as classes so strawberry creates a fresh instance
for every execution.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from graphql.validation import NoSchemaIntrospectionCustomRule
from strawberry.extensions import AddValidationRules, QueryDepthLimiter, SchemaExtension

if TYPE_CHECKING:
    from modulith.core.settings.graphql import GraphQLSettings

logger = logging.getLogger(__name__)

# Maximum query depth to prevent deeply nested queries
MAX_QUERY_DEPTH = 10


def configured(extension_cls: type[SchemaExtension], **options: Any) -> type[SchemaExtension]:
    """Subclass of ``extension_cls`` that is constructed with ``options``.

    Example:
        extensions = [configured(QueryDepthLimiter, max_depth=5)]
    """

    class Configured(extension_cls):  # type: ignore[valid-type, misc]
        def __init__(self, *, execution_context: Any = None) -> None:
            super().__init__(**options)
            if execution_context is not None:
                self.execution_context = execution_context

    Configured.__name__ = Configured.__qualname__ = extension_cls.__name__
    Configured.options = dict(options)  # type: ignore[attr-defined]
    return Configured


def get_extensions(settings: GraphQLSettings | None = None) -> list[type[SchemaExtension]]:
    """Get list of Strawberry extensions for the schema.

    Args:
        settings: GraphQL settings; defaults are used when omitted.

    Returns:
        List of extension classes
    """
    max_depth = settings.max_query_depth if settings is not None else MAX_QUERY_DEPTH
    introspection = settings.introspection_enabled if settings is not None else True

    extensions: list[type[SchemaExtension]] = [
        # Limit query depth to prevent abuse
        configured(QueryDepthLimiter, max_depth=max_depth),
    ]
    if not introspection:
        extensions.append(configured(AddValidationRules, validation_rules=[NoSchemaIntrospectionCustomRule]))

    logger.debug(
        "GraphQL extensions configured: depth limit=%d, introspection=%s",
        max_depth,
        introspection,
    )
    return extensions


__all__ = ["MAX_QUERY_DEPTH", "configured", "get_extensions"]
