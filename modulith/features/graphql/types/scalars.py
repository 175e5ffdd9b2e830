"""Custom GraphQL scalars.

Provides custom scalar types for:
- Email: Validated e-mail address (serialized as string)

``JSON`` is re-exported from strawberry for use as a field type; strawberry
maps it natively, so it is not part of ``DEFAULT_SCALARS``.

``DateTime`` needs no custom scalar: strawberry maps ``datetime`` to it.
"""

from __future__ import annotations

import re
from typing import Any, NewType

import strawberry
from strawberry.scalars import JSON

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _parse_email(value: Any) -> str:
    if not isinstance(value, str) or not _EMAIL_PATTERN.match(value):
        msg = f"Invalid email address: {value!r}"
        raise ValueError(msg)
    return value.strip().lower()


# Email scalar that validates on input and serializes to string
Email = strawberry.scalar(
    NewType("Email", str),
    name="Email",
    description="An e-mail address (validated on input, serialized as string)",
    serialize=str,
    parse_value=_parse_email,
)

DEFAULT_SCALARS: dict[str, Any] = {
    "Email": Email,
}

__all__ = ["DEFAULT_SCALARS", "JSON", "Email"]
