"""Modular monolith GraphQL backend.

Independently authored modules register their models, type composers and
resolvers with a shared application host; the schema composer assembles them
into one executable strawberry schema.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
