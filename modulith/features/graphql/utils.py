"""Small helpers shared by resolvers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def resolve_attribute(obj: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an object, returning None when absent.

    Used as the schema's default resolver so resolvers may return ORM rows,
    dataclasses or plain dicts interchangeably.
    """
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


__all__ = ["resolve_attribute"]
