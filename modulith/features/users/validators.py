"""Input validation for the users module.

Registered in the module's ``validators`` bucket so other modules (and the
resolvers here) validate user payloads the same way.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegistrationPayload(BaseModel):
    """Validated data for creating a user."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("first_name", "last_name")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        return v or None


def validate_registration(data: dict[str, Any]) -> RegistrationPayload:
    """Validate user registration data.

    Raises:
        pydantic.ValidationError: If the payload is invalid.
    """
    return RegistrationPayload.model_validate(data)


VALIDATORS = {
    "registration": validate_registration,
}

__all__ = ["VALIDATORS", "RegistrationPayload", "validate_registration"]
