"""GraphQL composition settings.

Controls query limits, introspection, the global timestamp decorator and how
root-field name conflicts between modules are settled.
Environment variables use GRAPHQL_ prefix.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ResolverConflict = Literal["first", "last", "error"]


class GraphQLSettings(BaseSettings):
    """GraphQL schema composition configuration.

    Environment variables use GRAPHQL_ prefix.
    Example: GRAPHQL_MAX_QUERY_DEPTH=8, GRAPHQL_RESOLVER_CONFLICT=error
    """

    # Query limits for security
    max_query_depth: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum query nesting depth",
    )

    # Introspection (security)
    introspection_enabled: bool = Field(
        default=True,
        description="Enable GraphQL schema introspection (disable in production for security)",
    )

    # Global type decorators
    timestamps_enabled: bool = Field(
        default=True,
        description="Add createdAt/updatedAt fields to every composed object type",
    )

    # Root field merge policy
    resolver_conflict: ResolverConflict = Field(
        default="last",
        description=(
            "How same-named Query/Mutation fields from two modules are settled: "
            "last (later module wins), first (earlier module wins) or error"
        ),
    )

    placeholder_field: str = Field(
        default="health",
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Query field synthesized when no module contributes one",
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("resolver_conflict", mode="before")
    @classmethod
    def normalize_conflict(cls, v: str) -> str:
        """Normalize the conflict policy to lowercase."""
        if isinstance(v, str):
            return v.lower()
        return v
