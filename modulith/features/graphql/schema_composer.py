"""Schema composer.

Builds one executable strawberry schema from every loaded module:

1. reset the namespace (composition is idempotent and restartable)
2. install configured custom scalars
3. install module type composers in load order (first writer wins)
4. merge module Query/Mutation resolver maps (conflict policy applies)
5. apply merged fields to the root types; Mutation only when non-empty
6. run global relation callbacks
7. apply type decorators to every non-root object type
8. add a placeholder Query field when no module contributed one
9. build fresh strawberry types and the schema

Module relations are not run here; they run once in ``Application.post_load``
and mutate the composers in place before composition.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import TYPE_CHECKING, Any

import strawberry
from strawberry.schema.config import StrawberryConfig

from modulith.core.exceptions import MissingApplicationError, ResolverConflictError
from modulith.features.graphql.builder import build_types
from modulith.features.graphql.composers import (
    FieldConfig,
    ScalarTypeComposer,
    TypeComposer,
    is_strawberry_scalar,
)
from modulith.features.graphql.config import CompositionConfig, ResolverConflictPolicy
from modulith.features.graphql.namespace import MUTATION, QUERY, SchemaNamespace
from modulith.features.graphql.utils import resolve_attribute

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext
    from modulith.core.modules.descriptor import ModuleDescriptor
    from modulith.core.modules.host import Application

logger = logging.getLogger(__name__)

__all__ = [
    "apply_type_decorators",
    "compose_schema",
    "install_scalars",
    "install_type_composers",
    "merge_root_resolvers",
    "module_resolvers",
    "module_type_composers",
]

ROOT_OPERATIONS = (QUERY, MUTATION)


def module_type_composers(module: ModuleDescriptor, app: Application) -> dict[str, Any]:
    """Composers declared on the descriptor plus those registered in the registry."""
    composers = dict(module.type_composers)
    record = app.get_module(module.id) or {}
    for key, composer in (record.get("type_composers") or {}).items():
        composers.setdefault(key, composer)
    return composers


def module_resolvers(module: ModuleDescriptor, app: Application) -> dict[str, dict[str, Any]]:
    """Root resolver maps of a module; descriptor entries win over registry ones."""
    record = app.get_module(module.id) or {}
    registered = record.get("resolvers") or {}
    merged: dict[str, dict[str, Any]] = {}
    for operation in dict.fromkeys([*registered, *module.resolvers]):
        fields = {**(registered.get(operation) or {}), **(module.resolvers.get(operation) or {})}
        if fields:
            merged[operation] = fields
    return merged


def install_scalars(namespace: SchemaNamespace, scalars: Mapping[str, Any]) -> None:
    for key, scalar in scalars.items():
        if not is_strawberry_scalar(scalar):
            logger.warning("Skipping custom scalar %s: not a strawberry scalar", key)
            continue
        if not namespace.add(key, ScalarTypeComposer(scalar)):
            logger.warning("Custom scalar %s clashes with an installed type; skipped", key)


def install_type_composers(namespace: SchemaNamespace, modules: list[ModuleDescriptor], app: Application) -> int:
    """Install module composers in load order.

    Returns:
        Number of composers dropped because of collisions.
    """
    dropped = 0
    for module in modules:
        for key, composer in module_type_composers(module, app).items():
            if not isinstance(composer, TypeComposer):
                logger.warning(
                    "Skipping %s from module %s: not a type composer",
                    key,
                    module.id,
                    extra={"module_id": module.id},
                )
                continue
            if namespace.add(key, composer, module.id):
                logger.debug("Registered type composer %s from module %s", key, module.id)
                continue
            dropped += 1
            collision = namespace.collisions[-1]
            logger.warning(
                "Type name collision: %s already registered by %s; skipping the one from %s",
                key,
                collision.kept_module,
                module.id,
                extra={"type_key": key, "kept_module": collision.kept_module, "dropped_module": module.id},
            )
    return dropped


def merge_root_resolvers(
    namespace: SchemaNamespace,
    modules: list[ModuleDescriptor],
    app: Application,
    policy: ResolverConflictPolicy = ResolverConflictPolicy.LAST,
) -> dict[str, dict[str, Any]]:
    """Accumulate every module's Query and Mutation fields.

    Returns:
        ``{"Query": {...}, "Mutation": {...}}`` field maps.

    Raises:
        ResolverConflictError: On a cross-module field clash under ``ERROR``.
    """
    merged: dict[str, dict[str, Any]] = {op: {} for op in ROOT_OPERATIONS}
    owners: dict[str, dict[str, str]] = {op: {} for op in ROOT_OPERATIONS}

    for module in modules:
        resolvers = module_resolvers(module, app)
        if resolvers:
            namespace.resolvers[module.id] = resolvers
        for operation, fields in resolvers.items():
            if operation not in merged:
                logger.warning(
                    "Ignoring unsupported root type %s from module %s",
                    operation,
                    module.id,
                    extra={"module_id": module.id},
                )
                continue
            for name, field in fields.items():
                owner = owners[operation].get(name)
                if owner is not None and owner != module.id:
                    if policy is ResolverConflictPolicy.ERROR:
                        raise ResolverConflictError(
                            detail=f"{operation}.{name} is defined by both '{owner}' and '{module.id}'",
                            extra={"operation": operation, "field": name, "modules": [owner, module.id]},
                        )
                    keep = owner if policy is ResolverConflictPolicy.FIRST else module.id
                    logger.warning(
                        "Duplicate %s field '%s' from modules %s and %s; using %s",
                        operation,
                        name,
                        owner,
                        module.id,
                        keep,
                    )
                    if policy is ResolverConflictPolicy.FIRST:
                        continue
                merged[operation][name] = field
                owners[operation][name] = module.id

    return merged


def apply_type_decorators(namespace: SchemaNamespace, decorators: list[Any]) -> None:
    if not decorators:
        return
    for composer in namespace.object_types():
        for decorate in decorators:
            decorate(composer)


def _run_global_relations(namespace: SchemaNamespace, ctx: ModuleContext, callbacks: list[Any]) -> None:
    for callback in callbacks:
        name = getattr(callback, "__name__", repr(callback))
        try:
            callback(namespace, ctx)
        except Exception:
            logger.exception("Error executing global relation %s", name)
        else:
            logger.debug("Executed global relation %s", name)


def _placeholder_resolver(root: Any, info: Any) -> str:
    return "ok"


def compose_schema(ctx: ModuleContext, namespace: SchemaNamespace | None = None) -> strawberry.Schema:
    """Compose every loaded module into one strawberry schema.

    Args:
        ctx: Module context holding the ``Application`` as ``ctx.app``.
        namespace: Namespace to (re)build; defaults to ``ctx.namespace`` or a
            new one. Stored back on ``ctx.namespace``.

    Returns:
        The executable schema (also stored as ``ctx.schema``).

    Raises:
        MissingApplicationError: If ``ctx.app`` is not set.
        ResolverConflictError: Under the ``error`` conflict policy.
        UnresolvedTypeError: If a field references a type that was never installed.

    Example:
        >>> app = Application(ctx).load(users.module)
        >>> await app.post_load()
        >>> schema = compose_schema(ctx)
    """
    app = ctx.app
    if app is None:
        raise MissingApplicationError(detail="Application instance with get_modules() not found in context")

    config = ctx.graphql_config
    if config is None:
        config = CompositionConfig.from_settings()
        ctx.graphql_config = config

    if namespace is None:
        namespace = ctx.namespace if ctx.namespace is not None else SchemaNamespace()
    ctx.namespace = namespace

    modules = app.get_modules()
    namespace.reset()

    install_scalars(namespace, config.custom_scalars)
    install_type_composers(namespace, modules, app)

    root_fields = merge_root_resolvers(namespace, modules, app, config.resolver_conflict)
    namespace.query.add_fields(root_fields[QUERY])
    if root_fields[MUTATION]:
        namespace.get_or_create_mutation().add_fields(root_fields[MUTATION])

    _run_global_relations(namespace, ctx, config.global_relations)
    apply_type_decorators(namespace, config.type_decorators)

    # If no queries were contributed, provide a minimal health check query
    if not len(namespace.query):
        logger.warning("No queries contributed! Adding placeholder %s query.", config.placeholder_field)
        namespace.query.add_field(
            config.placeholder_field,
            FieldConfig(type=str, resolve=_placeholder_resolver, description="Health check endpoint"),
        )

    logger.info(
        "Schema composition complete: %d types from %d modules",
        len(namespace.composers()),
        len(modules),
        extra={"modules": [m.id for m in modules], "collisions": len(namespace.collisions)},
    )

    try:
        built = build_types(namespace)
        schema = strawberry.Schema(
            query=built.query,
            mutation=built.mutation,
            types=built.types,
            extensions=config.build_extensions(),
            config=StrawberryConfig(default_resolver=resolve_attribute),
        )
    except Exception:
        logger.exception("Error building final schema")
        raise

    ctx.schema = schema
    return schema
