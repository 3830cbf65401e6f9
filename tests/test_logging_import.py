"""
Test that wallet_logging can be imported without circular import and logger works.
"""

from __future__ import annotations

import structlog


def test_logging_import():
    """Import get_logger from wallet_logging and use the logger."""
    from backend_wallet.wallet_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", network="base", address="0xabc")


def test_bind_request_sets_context():
    """bind_request replaces the task context with the request id and extras."""
    from backend_wallet.wallet_logging import bind_request

    bind_request("req-1", path="/wallet")
    ctx = structlog.contextvars.get_contextvars()
    assert ctx["request_id"] == "req-1"
    assert ctx["path"] == "/wallet"
    bind_request("req-2")
    ctx = structlog.contextvars.get_contextvars()
    assert ctx == {"request_id": "req-2"}
    structlog.contextvars.clear_contextvars()


def test_service_name_is_added():
    """Every event dict is tagged with the service name unless already set."""
    from backend_wallet.wallet_logging.logger import SERVICE_NAME, _add_service

    assert _add_service(None, "info", {"event": "x"})["service"] == SERVICE_NAME
    assert _add_service(None, "info", {"service": "other"})["service"] == "other"
