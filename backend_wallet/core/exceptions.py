"""
Application-level exceptions.

Domain exceptions carry a machine-readable code and an HTTP status so the API
layer can map them to the response envelope in one place.
"""

from __future__ import annotations

from typing import Any


class WalletEngineError(Exception):
    """Base class for all engine errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, *, code: str | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details


class ConfigurationError(WalletEngineError):
    """Missing credentials for custody, indexer or price services."""

    code = "SERVICE_UNAVAILABLE"
    status_code = 503


class CustodyUnavailable(ConfigurationError):
    """Custody credentials absent or the custody service rejected the call."""


class ValidationError(WalletEngineError):
    """Malformed address, amount, network or missing field. Never retried."""

    code = "INVALID_REQUEST"
    status_code = 400


class UpstreamPartialFailure(WalletEngineError):
    """One network's fetch failed; logged and excluded from the aggregate."""

    def __init__(self, network: str, cause: BaseException) -> None:
        super().__init__(f"{network}: {cause}")
        self.network = network
        self.cause = cause


class UpstreamTotalFailure(WalletEngineError):
    """Every network failed for an aggregation call."""

    def __init__(self, operation: str, failures: list[UpstreamPartialFailure]) -> None:
        networks = ", ".join(f.network for f in failures) or "none"
        super().__init__(
            f"All networks failed for {operation} ({networks})",
            code=operation,
            details=[{"network": f.network, "error": str(f.cause)} for f in failures],
        )
        self.operation = operation
        self.failures = failures


class TransferFailed(WalletEngineError):
    """No path confirmed a transfer; details list each attempted path and its error."""

    code = "SEND_FAILED"

    def __init__(
        self,
        message: str,
        attempts: list[dict[str, Any]],
        *,
        code: str | None = None,
        tx_hash: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"attemptedPaths": attempts}
        if tx_hash is not None:
            # Broadcast but unconfirmed or reverted: look this up before sending again
            details["transactionHash"] = tx_hash
        super().__init__(message, code=code, details=details)
        self.attempts = attempts
        self.tx_hash = tx_hash
