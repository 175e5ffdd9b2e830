"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from modulith.core.settings.loader import get_graphql_settings

    settings = get_graphql_settings()  # First call: loads and validates
    settings = get_graphql_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_graphql_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .database import DatabaseSettings
from .graphql import GraphQLSettings
from .logs import LoggingSettings
from .modules import ModuleSettings


@lru_cache(maxsize=1)
def get_graphql_settings() -> GraphQLSettings:
    """Get cached GraphQL composition settings.

    Returns:
        Validated and frozen GraphQLSettings instance.
    """
    return GraphQLSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_module_settings() -> ModuleSettings:
    """Get cached module loading settings.

    Returns:
        Validated and frozen ModuleSettings instance.
    """
    return ModuleSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings.

    Returns:
        Validated and frozen DatabaseSettings instance.
    """
    return DatabaseSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance (tests and reconfiguration)."""
    get_graphql_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_module_settings.cache_clear()
    get_db_settings.cache_clear()
