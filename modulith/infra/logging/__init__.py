"""Logging infrastructure.

Provides structured logging with:
- JSONL format for log aggregation
- Automatic context injection (module_id, phase, ...)

Basic usage:
    from modulith.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(module_id="users")
    logger.info("Registering assets")  # Automatically includes module_id
"""

from modulith.infra.logging.config import (
    build_logging_config,
    configure_logging,
    reset_logging_state,
    setup_logging,
)
from modulith.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    log_context,
    remove_from_log_context,
    set_log_context,
)
from modulith.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "build_logging_config",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "log_context",
    "remove_from_log_context",
    "reset_logging_state",
    "set_log_context",
    "setup_logging",
]
