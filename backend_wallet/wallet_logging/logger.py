"""
Structured logging for the wallet engine.

Every line carries an ISO timestamp, the level, the snake_case event under
`event_type`, the emitting module under `logger`, and whatever request
context the HTTP middleware bound (request_id, method, path).

    logger = get_logger(__name__)
    logger.info("balances_aggregated", address=addr, token_count=4, total_usd=12.5)

LOG_LEVEL picks the threshold; LOG_FORMAT=json (default) or console.
No backend_wallet imports here: every other module imports this one.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

SERVICE_NAME = "backend-wallet"


def _add_service(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _renderer() -> Any:
    if LOG_FORMAT == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_structlog() -> None:
    """Configure structlog once, at first import."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _add_service,
            structlog.processors.EventRenamer("event_type"),
            _renderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, LOG_LEVEL, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name).bind(logger=name)


def bind_request(request_id: str, **extra: Any) -> None:
    """Replace the task's log context with a correlation id plus extra keys."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **extra)
