"""Module loading settings.

Selects which module factories the bootstrap loads, in order.
Environment variables use MODULES_ prefix.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from modulith.features import DEFAULT_MODULES


class ModuleSettings(BaseSettings):
    """Module loading configuration.

    Environment variables use MODULES_ prefix.
    Example: MODULES_ENABLED='["modulith.features.users:module"]'
    """

    enabled: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MODULES),
        description="Import paths ('package.module:attr') of module factories, in load order",
    )

    model_config = SettingsConfigDict(
        env_prefix="MODULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @field_validator("enabled")
    @classmethod
    def reject_duplicates(cls, v: list[str]) -> list[str]:
        """Reject module paths listed more than once."""
        seen: set[str] = set()
        for path in v:
            if path in seen:
                msg = f"Module '{path}' is listed more than once"
                raise ValueError(msg)
            seen.add(path)
        return v
