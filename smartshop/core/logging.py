"""Shared structlog configuration, used by the web app and the chat loop."""

from __future__ import annotations

import logging

import structlog

from smartshop.core.config import Config, load_config

_LOG_LEVEL_MAP: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(config: Config | None = None) -> None:
    """Configure structlog with console renderer in dev, JSON otherwise.

    JSON output can also be forced with ``logging.json_logs = true``.
    """
    if config is None:
        config = load_config()

    use_json = config.logging.json_logs or config.app.environment != "development"
    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )

    level = _LOG_LEVEL_MAP.get(config.logging.level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
