"""GraphQL type composers of the users module.

Composers are created per module instance so every application (and every
test) starts from clean, unshared field maps.
"""

from __future__ import annotations

import strawberry

from modulith.features.graphql.composers import FieldConfig, InputTypeComposer, ObjectTypeComposer
from modulith.features.graphql.types.scalars import Email
from modulith.features.graphql.utils import resolve_attribute


def _full_name(root, info) -> str:
    first = resolve_attribute(root, "first_name")
    last = resolve_attribute(root, "last_name")
    return " ".join(part for part in (first, last) if part) or resolve_attribute(root, "username") or ""


def build_type_composers() -> dict[str, ObjectTypeComposer | InputTypeComposer]:
    """Create ``UserTC`` and ``CreateUserInputTC``."""
    user_tc = ObjectTypeComposer(
        "User",
        description="Application user account",
        fields={
            "id": strawberry.ID,
            "username": str,
            "email": Email,
            "first_name": FieldConfig(str, nullable=True),
            "last_name": FieldConfig(str, nullable=True),
            "full_name": FieldConfig(str, resolve=_full_name, description="First and last name, or username"),
            "role": str,
            "is_active": bool,
        },
    )
    create_user_input_tc = InputTypeComposer(
        "CreateUserInput",
        description="Data required to create a user",
        fields={
            "username": str,
            "email": Email,
            "first_name": FieldConfig(str, nullable=True),
            "last_name": FieldConfig(str, nullable=True),
        },
    )
    return {"UserTC": user_tc, "CreateUserInputTC": create_user_input_tc}


__all__ = ["build_type_composers"]
