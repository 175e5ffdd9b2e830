"""Developer tools for inspecting the module system and the composed schema.

These helpers never raise on a half-initialised context: they log a warning
and return an empty result instead, so they are safe to call from a REPL or
a debug endpoint at any point of the lifecycle.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import inspect
import logging
import time
from typing import TYPE_CHECKING, Any

from strawberry.printer import print_schema

from modulith.features.graphql.composers import EnumTypeComposer, FieldConfig, TypeKind, is_prebuilt_field

if TYPE_CHECKING:
    import strawberry

    from modulith.core.modules.context import ModuleContext

logger = logging.getLogger(__name__)

ASSET_BUCKETS = ("models", "type_composers", "resolvers", "services", "actions", "validators")


def inspect_modules(ctx: ModuleContext) -> list[dict[str, Any]]:
    """Summarise every loaded module: metadata, callbacks and asset buckets."""
    app = ctx.app
    if app is None:
        logger.warning("Cannot inspect modules: application not found on context")
        return []

    summaries = []
    for module in app.get_modules():
        record = app.get_module(module.id) or {}
        summary: dict[str, Any] = {
            "id": module.id,
            "meta": module.meta.model_dump(),
            "state": str(app.state_of(module.id)),
        }
        for callback in ("on_load", "relations", "hooks", "init", "on_ready", "on_destroy"):
            summary[f"has_{callback}"] = callable(getattr(module, callback))
        for bucket in ASSET_BUCKETS:
            summary[f"has_{bucket}"] = bool(getattr(module, bucket)) or bool(record.get(bucket))
        summaries.append(summary)
    return summaries


def _describe_field(descriptor: Any) -> str:
    if isinstance(descriptor, FieldConfig):
        return "resolver" if descriptor.has_resolver else "plain"
    if is_prebuilt_field(descriptor):
        return "strawberry"
    return "function"


def inspect_type_composers(ctx: ModuleContext) -> dict[str, dict[str, Any]]:
    """Describe the composers of the last composition, keyed by composer key."""
    namespace = ctx.namespace
    if namespace is None:
        logger.warning("Cannot inspect type composers: no schema namespace on context")
        return {}

    result: dict[str, dict[str, Any]] = {}
    for key, composer in namespace.items():
        details: dict[str, Any] = {
            "type_name": composer.name,
            "kind": str(composer.kind),
            "module": namespace.owner(key),
        }
        if composer.kind in (TypeKind.OBJECT, TypeKind.INPUT):
            fields = composer.fields  # type: ignore[attr-defined]
            details["fields"] = list(fields)
            details["resolvers"] = [n for n, f in fields.items() if _describe_field(f) != "plain"]
            details["relations"] = list(getattr(composer, "relation_names", []))
        elif isinstance(composer, EnumTypeComposer):
            details["values"] = list(composer.values)
        result[key] = details
    return result


def print_composed_schema(schema: strawberry.Schema | None, log: bool = True) -> str:
    """Return the schema SDL, logging it at INFO level when ``log`` is set."""
    if schema is None:
        logger.error("Cannot print schema: schema object is missing")
        return ""
    sdl = print_schema(schema)
    if log:
        logger.info("Composed GraphQL schema:\n%s", sdl)
    return sdl


async def profile_schema(
    build: Callable[[], strawberry.Schema | Awaitable[strawberry.Schema]],
) -> strawberry.Schema:
    """Run ``build`` (sync or async) and log how long composition took."""
    start = time.perf_counter()
    schema = build()
    if inspect.isawaitable(schema):
        schema = await schema
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("Schema composed in %.2fms", duration_ms, extra={"duration_ms": round(duration_ms, 2)})
    return schema


def get_registered_modules_summary(ctx: ModuleContext) -> dict[str, Any]:
    """One-glance summary of modules, composed types and recorded collisions."""
    app = ctx.app
    namespace = ctx.namespace
    module_ids = [m.id for m in app.get_modules()] if app is not None else []
    return {
        "module_count": len(module_ids),
        "modules": module_ids,
        "states": {mid: str(app.state_of(mid)) for mid in module_ids} if app is not None else {},
        "type_count": len(namespace.composers()) if namespace is not None else 0,
        "query_fields": namespace.query.field_names() if namespace is not None else [],
        "mutation_fields": (
            namespace.mutation.field_names() if namespace is not None and namespace.mutation is not None else []
        ),
        "collisions": [
            {"name": c.name, "kept_module": c.kept_module, "dropped_module": c.dropped_module}
            for c in (namespace.collisions if namespace is not None else [])
        ],
    }


__all__ = [
    "get_registered_modules_summary",
    "inspect_modules",
    "inspect_type_composers",
    "print_composed_schema",
    "profile_schema",
]
