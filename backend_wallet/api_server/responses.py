"""
Response envelope: {success, data?} or {success: false, error: {code, message, details?}}.

Every route answers through these helpers so the shape never drifts.
"""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from backend_wallet.core.exceptions import WalletEngineError
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)


def send_success(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": True, "data": data})


def send_error(status_code: int, code: str, message: str, details: Any = None) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def error_from_exception(exc: Exception, *, code: str, message: str) -> JSONResponse:
    """
    Map an exception to the envelope.

    Engine errors carry their own status and code. Anything else becomes the
    operation's failure code with only the exception message as details.
    """
    if isinstance(exc, WalletEngineError):
        logger.warning(
            "request_failed",
            code=exc.code,
            status_code=exc.status_code,
            error=exc.message,
        )
        return send_error(exc.status_code, exc.code, exc.message, exc.details)
    logger.error("request_failed_unexpected", code=code, error=str(exc), error_type=type(exc).__name__)
    return send_error(500, code, message, str(exc))
