"""
Async JSON-over-HTTP client shared by the indexer and price oracles.

Wraps one httpx.AsyncClient with a bounded timeout. Idempotent reads may be
retried with exponential backoff; callers opt in per call so that write-style
requests (broadcasts) are never retried implicitly.
"""

from __future__ import annotations

import asyncio
import itertools
import re
from typing import Any

import httpx

from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

# JSON-RPC request id counter
_request_ids = itertools.count(1)

# Status codes worth retrying on an idempotent read
RETRYABLE_STATUS = frozenset({408, 425, 429, 500, 502, 503, 504})

# Alchemy puts the API key in the path right after these prefixes
_KEY_SEGMENT_RE = re.compile(r'(/v2/|/nft/v3/)[^/\s\'"?#)]+')


class HttpRequestError(Exception):
    """Transport failure, non-2xx status or malformed JSON body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RpcError(HttpRequestError):
    """JSON-RPC response carried an `error` member."""

    def __init__(self, method: str, error: Any) -> None:
        if isinstance(error, dict):
            message = f"RPC error in {method}: {error.get('message', error)} (code={error.get('code')})"
        else:
            message = f"RPC error in {method}: {error}"
        super().__init__(message)
        self.method = method
        self.error = error


def build_rpc_body(method: str, params: list[Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": method,
        "params": params,
    }


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, RpcError):
        return False
    if isinstance(exc, HttpRequestError):
        return exc.status_code is None or exc.status_code in RETRYABLE_STATUS
    return isinstance(exc, httpx.TransportError)


class JsonHttpClient:
    """
    Thin async JSON client with timeout and opt-in retry/backoff.

    Pass `transport` (e.g. httpx.MockTransport) in tests to fake upstreams.
    """

    def __init__(
        self,
        *,
        timeout_sec: float = 15.0,
        max_retries: int = 3,
        min_retry_delay_sec: float = 0.5,
        max_retry_delay_sec: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        self._max_retries = max(1, max_retries)
        self._min_retry_delay = min_retry_delay_sec
        self._max_retry_delay = max_retry_delay_sec
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_sec),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request_once(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None,
        json_body: Any,
        headers: dict[str, str] | None,
    ) -> Any:
        try:
            resp = await self._client.request(method, url, params=params, json=json_body, headers=headers)
        except httpx.HTTPError as e:
            raise HttpRequestError(f"{method} {redact(url)} failed: {redact(str(e))}") from e
        if resp.status_code >= 400:
            raise HttpRequestError(
                f"{method} {redact(url)} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise HttpRequestError(f"{method} {redact(url)} returned invalid JSON") from e

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        retry: bool = True,
    ) -> Any:
        """Perform a request and decode JSON; retry transient failures when `retry` is set."""
        attempts = self._max_retries if retry else 1
        delay = self._min_retry_delay
        for attempt in range(attempts):
            try:
                return await self._request_once(
                    method, url, params=params, json_body=json_body, headers=headers
                )
            except HttpRequestError as e:
                if attempt + 1 >= attempts or not _is_retryable(e):
                    raise
                logger.warning(
                    "http_retry",
                    url=redact(url),
                    attempt=attempt + 1,
                    max_retries=attempts,
                    error=str(e),
                )
                await asyncio.sleep(delay)
                delay = min(delay * 2, self._max_retry_delay)
        raise AssertionError("unreachable")

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        return await self.request_json("GET", url, **kwargs)

    async def post_json(self, url: str, body: Any, **kwargs: Any) -> Any:
        return await self.request_json("POST", url, json_body=body, **kwargs)

    async def rpc_call(self, url: str, method: str, params: list[Any], *, retry: bool = True) -> Any:
        """Perform a JSON-RPC call; raise RpcError on an `error` member, return `result`."""
        data = await self.post_json(url, build_rpc_body(method, params), retry=retry)
        if not isinstance(data, dict):
            raise HttpRequestError(f"RPC {method} returned a non-object body")
        if data.get("error"):
            raise RpcError(method, data["error"])
        return data.get("result")


def redact(text: str) -> str:
    """Mask API-key path segments in a URL or in any message that embeds one."""
    return _KEY_SEGMENT_RE.sub(r"\1***", text)
