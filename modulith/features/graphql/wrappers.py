"""Type decorators applied to every composed object type.

A type decorator is any ``(ObjectTypeComposer) -> None`` callable listed in
``CompositionConfig.type_decorators``. The composer applies them after module
types and global relations are installed, to non-root object types only.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from modulith.features.graphql.composers import FieldConfig, ObjectTypeComposer, TypeKind
from modulith.features.graphql.utils import resolve_attribute


def _timestamp_resolver(attribute: str):
    def resolve(root: Any, info: Any) -> datetime:
        value = resolve_attribute(root, attribute)
        return value if value is not None else datetime.now(UTC)

    resolve.__name__ = f"resolve_{attribute}"
    return resolve


def with_timestamps(tc: Any) -> None:
    """Add ``created_at`` / ``updated_at`` (``DateTime!``) unless already present.

    Missing source values fall back to the current UTC time. Composers other
    than object types are ignored.
    """
    if not isinstance(tc, ObjectTypeComposer) or tc.kind is not TypeKind.OBJECT:
        return

    if not tc.has_field("created_at"):
        tc.add_field(
            "created_at",
            FieldConfig(
                type=datetime,
                resolve=_timestamp_resolver("created_at"),
                description="Timestamp when the record was created",
            ),
        )
    if not tc.has_field("updated_at"):
        tc.add_field(
            "updated_at",
            FieldConfig(
                type=datetime,
                resolve=_timestamp_resolver("updated_at"),
                description="Timestamp when the record was last updated",
            ),
        )


__all__ = ["with_timestamps"]
