"""Modular Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from modulith.core.settings import get_graphql_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file (development only)
"""

from __future__ import annotations

from .database import DatabaseSettings
from .graphql import GraphQLSettings, ResolverConflict
from .loader import (
    clear_settings_cache,
    get_db_settings,
    get_graphql_settings,
    get_logging_settings,
    get_module_settings,
)
from .logs import LoggingSettings, LogLevel
from .modules import ModuleSettings

__all__ = [
    "DatabaseSettings",
    "GraphQLSettings",
    "LogLevel",
    "LoggingSettings",
    "ModuleSettings",
    "ResolverConflict",
    "clear_settings_cache",
    "get_db_settings",
    "get_graphql_settings",
    "get_logging_settings",
    "get_module_settings",
]
