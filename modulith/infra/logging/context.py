"""Context management for structured logging.

Provides automatic context injection into log records using contextvars, so
the application host can tag every record emitted while a module's lifecycle
callback runs (``module_id``, ``phase``) without the module passing anything.

This approach is:
- Async-safe: Works correctly across async/await boundaries
- Implicit: No need to modify existing logging calls
- Compatible: Works with standard Python logging
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from contextvars import ContextVar
from typing import Any

# Each async task gets its own copy automatically
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Set logging context for the current async task/thread.

    All subsequent log calls in this context will automatically include
    these fields in the log record.

    Args:
        **kwargs: Key-value pairs to add to logging context.

    Example:
        ```python
        set_log_context(module_id="users", phase="relations")
        logger.info("Attaching fields")  # Includes module_id and phase
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear all logging context for the current async task/thread."""
    _log_context.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove specific keys from logging context.

    Args:
        *keys: Keys to remove from context.
    """
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind context for the duration of a ``with`` block.

    Previous values are restored on exit, including when the block raises.

    Example:
        ```python
        with log_context(module_id="subscriptions", phase="init"):
            await descriptor.init(ctx, modules)
        ```
    """
    token = _log_context.set({**_log_context.get(), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that injects the contextvars log context into records.

    Attached to handlers by ``configure_logging`` so records propagated from
    child loggers are enriched too.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject context into log record.

        Args:
            record: The log record to enhance with context.

        Returns:
            True (always allow the record to be logged).
        """
        for key, value in _log_context.get().items():
            # Don't overwrite existing attributes
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


__all__ = [
    "ContextInjectingFilter",
    "clear_log_context",
    "get_log_context",
    "log_context",
    "remove_from_log_context",
    "set_log_context",
]
