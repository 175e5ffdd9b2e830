"""Shared application context handed to every module factory."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import strawberry

    from modulith.core.modules.host import Application
    from modulith.features.graphql.config import CompositionConfig
    from modulith.features.graphql.namespace import SchemaNamespace


@dataclass
class ContextMeta:
    """Process-level metadata exposed to modules."""

    root_dir: Path = field(default_factory=Path.cwd)
    boot_time: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class ModuleContext:
    """Mutable context shared by the host, the modules and the composer.

    Attributes:
        logger: Logger modules may use instead of creating their own.
        app: The ``Application`` host; injected by ``Application(ctx)``.
        models: Flat model name -> model handle map, filled on load.
        type_composers: Flat composer key -> composer map, first writer wins.
        resolvers: Free-form resolver registry for modules that share helpers.
        graphql_config: Composition config used by ``compose_schema``.
        namespace: Schema namespace of the last (or next) composition.
        schema: Last schema produced by ``compose_schema``.
        enums: Shared enum definitions.
        extras: Anything else (session factory, settings overrides, ...).
        meta: Process metadata.
    """

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("modulith"))
    app: Application | None = None
    models: dict[str, Any] = field(default_factory=dict)
    type_composers: dict[str, Any] = field(default_factory=dict)
    resolvers: dict[str, Any] = field(default_factory=dict)
    graphql_config: CompositionConfig | None = None
    namespace: SchemaNamespace | None = None
    schema: strawberry.Schema | None = None
    enums: dict[str, Any] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)
    meta: ContextMeta = field(default_factory=ContextMeta)


__all__ = ["ContextMeta", "ModuleContext"]
