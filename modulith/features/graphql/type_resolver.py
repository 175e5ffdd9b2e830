"""Lookup of type composers owned by other modules.

Relation callbacks run after every module is loaded, but the module that owns
a target type may have published it in several places (its registry record,
``ctx.type_composers``, a previously composed namespace). ``TypeResolver``
tries an ordered list of named lookup strategies and returns the first hit,
logging a warning when none finds the type so the caller can skip the
relation.

Example:
    resolver = TypeResolver.default(ctx)
    user_tc = resolver.resolve("UserTC", module_id="users")
    if user_tc is not None:
        user_tc.add_relation("subscriptions", has_many(...))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from modulith.features.graphql.composers import TypeComposer

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext

logger = logging.getLogger(__name__)

Lookup = Callable[[str, "str | None"], "TypeComposer | None"]


@dataclass(frozen=True)
class LookupStrategy:
    """A named lookup: ``(composer_key, module_id) -> composer | None``."""

    name: str
    lookup: Lookup

    def __call__(self, key: str, module_id: str | None = None) -> TypeComposer | None:
        return self.lookup(key, module_id)


def _as_composer(value: Any) -> TypeComposer | None:
    return value if isinstance(value, TypeComposer) else None


def module_registry_strategy(ctx: ModuleContext) -> LookupStrategy:
    """Look in the host's asset registry, scoped to ``module_id`` when given."""

    def lookup(key: str, module_id: str | None) -> TypeComposer | None:
        app = ctx.app
        if app is None:
            return None
        if module_id is not None:
            record = app.get_module(module_id) or {}
            return _as_composer((record.get("type_composers") or {}).get(key))
        for composers in app.get_type_composers().values():
            found = _as_composer((composers or {}).get(key))
            if found is not None:
                return found
        return None

    return LookupStrategy("module_registry", lookup)


def context_strategy(ctx: ModuleContext) -> LookupStrategy:
    """Look in the flat ``ctx.type_composers`` map."""
    return LookupStrategy("context", lambda key, _module_id: _as_composer(ctx.type_composers.get(key)))


def namespace_strategy(ctx: ModuleContext) -> LookupStrategy:
    """Look in the namespace of the last composition (by key, then type name)."""

    def lookup(key: str, _module_id: str | None) -> TypeComposer | None:
        namespace = ctx.namespace
        if namespace is None:
            return None
        return namespace.get(key) or namespace.find(key)

    return LookupStrategy("namespace", lookup)


class TypeResolver:
    """Resolve composer keys through an ordered list of strategies."""

    def __init__(self, strategies: list[LookupStrategy]) -> None:
        self.strategies = list(strategies)

    @classmethod
    def default(cls, ctx: ModuleContext) -> TypeResolver:
        """Registry first, then ``ctx.type_composers``, then the namespace."""
        return cls(
            [
                module_registry_strategy(ctx),
                context_strategy(ctx),
                namespace_strategy(ctx),
            ]
        )

    def resolve(self, key: str, module_id: str | None = None) -> TypeComposer | None:
        """Return the first composer found for ``key``, or None.

        Args:
            key: Composer key (``"UserTC"``) or, for the namespace strategy,
                a GraphQL type name.
            module_id: Owning module, narrows the registry lookup.
        """
        for strategy in self.strategies:
            found = strategy(key, module_id)
            if found is not None:
                logger.debug("Resolved %s via %s", key, strategy.name)
                return found

        logger.warning(
            "Type composer %s not found; tried %s",
            key,
            ", ".join(s.name for s in self.strategies),
            extra={"type_key": key, "owner_module": module_id},
        )
        return None

    def strategy_names(self) -> list[str]:
        return [s.name for s in self.strategies]


__all__ = [
    "LookupStrategy",
    "TypeResolver",
    "context_strategy",
    "module_registry_strategy",
    "namespace_strategy",
]
