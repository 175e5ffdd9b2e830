"""Database layer used by the bundled modules."""

from modulith.core.database.base import NAMING_CONVENTION, Base, IntegerPKMixin, TimestampMixin
from modulith.core.database.repository import BaseRepository
from modulith.core.database.session import create_engine, create_session_factory, init_models

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "IntegerPKMixin",
    "TimestampMixin",
    "create_engine",
    "create_session_factory",
    "init_models",
]
