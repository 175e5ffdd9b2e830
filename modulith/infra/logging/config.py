"""Logging configuration setup.

Provides logging configuration using:
- dictConfig for flexible configuration
- ContextInjectingFilter for automatic context propagation
- All handlers on root logger (child loggers propagate)
- JSONL format for machine parsing, or plain text for local runs
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from modulith.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from modulith.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = settings_obj.to_logging_kwargs()
    if configure_kwargs:
        log_config = {**log_config, **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    service_name: str = "modulith",
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig.

    All handlers are attached to the root logger; application loggers
    propagate up.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Enable JSONL (JSON Lines) structured logging.
        console_enabled: Enable console/stderr logging.
        include_context: Enable ContextInjectingFilter for auto context.
        capture_warnings: Forward Python warnings to logging system.
        service_name: Static ``service`` field added to JSON records.
        **kwargs: Unused settings, logged at DEBUG.

    Example:
        from modulith.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs.keys())))

    if capture_warnings:
        logging.captureWarnings(True)

    logging.config.dictConfig(
        build_logging_config(
            log_level=log_level,
            json_logs=json_logs,
            console_enabled=console_enabled,
            include_context=include_context,
            service_name=service_name,
        )
    )


def build_logging_config(
    log_level: str,
    json_logs: bool,
    console_enabled: bool,
    include_context: bool,
    service_name: str,
) -> dict[str, Any]:
    """Build the dictConfig dictionary.

    Args:
        log_level: Root logger level.
        json_logs: Use JSONL format.
        console_enabled: Enable console handler.
        include_context: Add ContextInjectingFilter to the console handler.
        service_name: Static service name for JSON records.

    Returns:
        Configuration dict accepted by logging.config.dictConfig.
    """
    formatters: dict[str, Any] = {}
    if json_logs:
        formatters["json"] = {
            "()": "modulith.infra.logging.formatters.JSONFormatter",
            "fmt_keys": {"level": "levelname", "logger": "name", "message": "message"},
            "static": {"service": service_name},
        }
    else:
        formatters["text"] = {
            "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }

    filters: dict[str, Any] = {}
    if include_context:
        filters["context"] = {
            "()": "modulith.infra.logging.context.ContextInjectingFilter",
        }

    handlers: dict[str, Any] = {}
    if console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": log_level.upper(),
            "formatter": "json" if json_logs else "text",
            "filters": list(filters),
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }


def reset_logging_state() -> None:
    """Allow setup_logging() to run again (tests)."""
    global _LOGGING_INITIALIZED
    _LOGGING_INITIALIZED = False


__all__ = ["build_logging_config", "configure_logging", "reset_logging_state", "setup_logging"]
