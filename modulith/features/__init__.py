"""Feature packages: GraphQL composition plus the bundled domain modules."""

from __future__ import annotations

# Import paths of the module factories loaded by default, in load order.
DEFAULT_MODULES: tuple[str, ...] = (
    "modulith.features.users:module",
    "modulith.features.subscriptions:module",
)

__all__ = ["DEFAULT_MODULES"]
