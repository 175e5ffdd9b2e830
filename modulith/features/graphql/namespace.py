"""Schema namespace: the per-composition registry of type composers.

The namespace is owned by the caller (``ctx.namespace`` by default) and reset
at the start of every composition, so composing twice from the same modules
produces the same schema.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
import logging
from typing import Any

from modulith.features.graphql.composers import ObjectTypeComposer, TypeComposer, TypeKind

logger = logging.getLogger(__name__)

QUERY = "Query"
MUTATION = "Mutation"
ROOT_OWNER = "<root>"


@dataclass(frozen=True)
class TypeCollision:
    """A composer dropped because its key or GraphQL name was already taken."""

    name: str
    kept_module: str | None
    dropped_module: str | None


class SchemaNamespace:
    """Registry of type composers for one composition.

    Attributes:
        query: Root ``Query`` composer (always present).
        mutation: Root ``Mutation`` composer, created on demand.
        resolvers: Module id -> raw ``{"Query": ..., "Mutation": ...}`` buckets.
        collisions: Collisions recorded since the last ``reset()``.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Drop every registered composer, resolver bucket and collision."""
        self._composers: dict[str, TypeComposer] = {}
        self._owners: dict[str, str | None] = {}
        self.resolvers: dict[str, dict[str, Any]] = {}
        self.collisions: list[TypeCollision] = []
        self.query = ObjectTypeComposer(QUERY, description="Root query type")
        self.mutation: ObjectTypeComposer | None = None

    def add(self, key: str, composer: TypeComposer, module_id: str | None = None) -> bool:
        """Register ``composer`` under ``key``; first writer wins.

        Re-adding the same object is a no-op. A different composer whose key or
        GraphQL name is already taken is dropped and a ``TypeCollision`` is
        recorded.

        Returns:
            True if ``composer`` is (now) registered, False if it was dropped.
        """
        existing = self._composers.get(key)
        if existing is composer:
            return True

        if existing is not None:
            kept = self._owners.get(key)
        elif composer.name in (QUERY, MUTATION):
            kept = ROOT_OWNER
        else:
            same_name = self.find(composer.name)
            # The same composer under a second key is an alias, not a clash
            if same_name is None or same_name is composer:
                self._composers[key] = composer
                self._owners[key] = module_id
                return True
            kept = self._owner_of(same_name)

        self.collisions.append(TypeCollision(name=key, kept_module=kept, dropped_module=module_id))
        return False

    def _owner_of(self, composer: TypeComposer) -> str | None:
        for key, candidate in self._composers.items():
            if candidate is composer:
                return self._owners.get(key)
        return None

    def get(self, key: str) -> TypeComposer | None:
        return self._composers.get(key)

    def find(self, type_name: str) -> TypeComposer | None:
        """Find a composer by GraphQL type name (root types included)."""
        if type_name == QUERY:
            return self.query
        if type_name == MUTATION:
            return self.mutation
        for composer in self._composers.values():
            if composer.name == type_name:
                return composer
        return None

    def has(self, key: str) -> bool:
        return key in self._composers

    def owner(self, key: str) -> str | None:
        """Module id that registered ``key``."""
        return self._owners.get(key)

    def items(self) -> list[tuple[str, TypeComposer]]:
        return list(self._composers.items())

    def keys(self) -> list[str]:
        return list(self._composers)

    def composers(self) -> list[TypeComposer]:
        """Registered composers, de-duplicated, in registration order."""
        seen: dict[int, TypeComposer] = {}
        for composer in self._composers.values():
            seen.setdefault(id(composer), composer)
        return list(seen.values())

    def object_types(self, include_roots: bool = False) -> list[ObjectTypeComposer]:
        """Object composers, optionally with the root Query/Mutation first."""
        result: list[ObjectTypeComposer] = []
        if include_roots:
            result.append(self.query)
            if self.mutation is not None:
                result.append(self.mutation)
        result.extend(c for c in self.composers() if c.kind is TypeKind.OBJECT)  # type: ignore[misc]
        return result

    def get_or_create_mutation(self) -> ObjectTypeComposer:
        if self.mutation is None:
            self.mutation = ObjectTypeComposer(MUTATION, description="Root mutation type")
        return self.mutation

    def __contains__(self, key: object) -> bool:
        return key in self._composers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._composers))

    def __len__(self) -> int:
        return len(self._composers)


__all__ = ["MUTATION", "QUERY", "SchemaNamespace", "TypeCollision"]
