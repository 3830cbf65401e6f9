"""
HTTP middleware — correlation ids and request timing.

Every request gets an X-Request-ID (the caller's, or a fresh uuid4) bound into
the structlog context and echoed on the response.
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request

from backend_wallet.wallet_logging import bind_request, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def request_context_middleware(request: Request, call_next):
    request_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip()[:128] or uuid.uuid4().hex
    bind_request(request_id, method=request.method, path=request.url.path)
    started = time.perf_counter()
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "request_completed",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response
