"""Shared GraphQL types."""

from modulith.features.graphql.types.scalars import DEFAULT_SCALARS, JSON, Email

__all__ = ["DEFAULT_SCALARS", "JSON", "Email"]
