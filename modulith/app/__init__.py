"""Application bootstrap."""

from modulith.app.bootstrap import build_application, create_context, lifespan

__all__ = ["build_application", "create_context", "lifespan"]
