"""Asset registry keyed by module id.

Modules register their assets (models, type composers, resolvers, services,
actions, validators) during ``on_load``. Repeated registrations for the same
module id are merged bucket by bucket according to a ``MergeStrategy``.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
import logging
from typing import Any

from modulith.core.exceptions import RegistrationError

logger = logging.getLogger(__name__)


class MergeStrategy(StrEnum):
    """How an incoming bucket is combined with the stored one."""

    MERGE = "merge"
    """Shallow key union, incoming keys win."""

    REPLACE = "replace"
    """Incoming value replaces the stored one wholesale."""

    AUTO = "auto"
    """Merge when both sides are mappings, otherwise replace."""


DEFAULT_BUCKET_STRATEGIES: dict[str, MergeStrategy] = {
    "models": MergeStrategy.MERGE,
    "type_composers": MergeStrategy.MERGE,
    "resolvers": MergeStrategy.MERGE,
    "actions": MergeStrategy.MERGE,
    "validators": MergeStrategy.MERGE,
    "services": MergeStrategy.MERGE,
}


def merge_bucket(existing: Any, incoming: Any, strategy: MergeStrategy) -> Any:
    """Combine a stored bucket with an incoming one.

    Args:
        existing: Currently stored value (may be None).
        incoming: Newly registered value.
        strategy: Merge strategy for the bucket.

    Returns:
        The value to store.
    """
    if strategy is MergeStrategy.REPLACE:
        return incoming
    if isinstance(incoming, Mapping):
        if existing is None:
            return dict(incoming)
        if isinstance(existing, Mapping):
            return {**existing, **incoming}
    return incoming


class AssetRegistry:
    """Registry of module assets.

    Entries are created on first registration, merged on later ones and never
    deleted. Iteration follows first-registration order.

    Example:
        registry = AssetRegistry()
        registry.register("users", models={"User": user_repo})
        registry.register("users", services={"mailer": mailer})
        registry.get_module("users")
        # {"id": "users", "models": {...}, "services": {...}}
    """

    def __init__(self, strategies: Mapping[str, MergeStrategy] | None = None) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._strategies = {**DEFAULT_BUCKET_STRATEGIES, **(strategies or {})}

    def strategy_for(self, bucket: str) -> MergeStrategy:
        """Return the merge strategy used for ``bucket``."""
        return self._strategies.get(bucket, MergeStrategy.AUTO)

    def register(self, module_id: str, **buckets: Any) -> dict[str, Any]:
        """Register (or merge) assets for a module.

        Args:
            module_id: Owning module id.
            **buckets: Asset buckets, e.g. ``models={...}``.

        Returns:
            The merged record for ``module_id``.

        Raises:
            RegistrationError: If ``module_id`` is not a non-empty string.
        """
        if not isinstance(module_id, str) or not module_id.strip():
            raise RegistrationError(
                detail="Cannot register module assets without a valid string 'id'",
                extra={"module_id": repr(module_id), "buckets": sorted(buckets)},
            )

        buckets.pop("id", None)
        record = self._records.setdefault(module_id, {"id": module_id})
        for name, value in buckets.items():
            record[name] = merge_bucket(record.get(name), value, self.strategy_for(name))

        logger.debug(
            "Registered assets for module %s",
            module_id,
            extra={"module_id": module_id, "buckets": sorted(buckets)},
        )
        return record

    def get_module(self, module_id: str) -> dict[str, Any] | None:
        return self._records.get(module_id)

    def has_module(self, module_id: str) -> bool:
        return module_id in self._records

    def get_all_assets(self) -> list[dict[str, Any]]:
        return list(self._records.values())

    def module_ids(self) -> list[str]:
        return list(self._records)

    def collect(self, bucket: str, module_ids: list[str] | None = None) -> dict[str, Any]:
        """Fold one bucket across modules.

        Args:
            bucket: Bucket name, e.g. ``"models"``.
            module_ids: Restrict (and order) the fold to these ids.

        Returns:
            ``{module_id: bucket_value}`` for modules that registered the bucket.
        """
        ids = module_ids if module_ids is not None else list(self._records)
        result: dict[str, Any] = {}
        for module_id in ids:
            record = self._records.get(module_id)
            if record is not None and bucket in record:
                result[module_id] = record[bucket]
        return result

    def get_models(self) -> dict[str, Any]:
        return self.collect("models")

    def get_type_composers(self) -> dict[str, Any]:
        return self.collect("type_composers")

    def get_services(self) -> dict[str, Any]:
        return self.collect("services")

    def get_actions(self) -> dict[str, Any]:
        return self.collect("actions")

    def get_validators(self) -> dict[str, Any]:
        return self.collect("validators")

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._records


__all__ = ["DEFAULT_BUCKET_STRATEGIES", "AssetRegistry", "MergeStrategy", "merge_bucket"]
