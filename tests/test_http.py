"""Tests for JsonHttpClient retry/backoff and JSON-RPC error handling."""

from __future__ import annotations

import httpx
import pytest

from backend_wallet.core.http import HttpRequestError, JsonHttpClient, RpcError, redact


def _client(handler, retries: int = 3) -> JsonHttpClient:
    return JsonHttpClient(
        max_retries=retries,
        min_retry_delay_sec=0.0,
        max_retry_delay_sec=0.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_retries_transient_status_then_succeeds():
    """5xx responses are retried until one succeeds."""
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    client = _client(handler)
    assert await client.get_json("https://example.test/x") == {"ok": True}
    assert len(calls) == 3
    await client.aclose()


@pytest.mark.asyncio
async def test_no_retry_on_client_error_or_when_disabled():
    """4xx responses and retry=False calls are attempted once."""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404 if request.url.path == "/missing" else 503)

    client = _client(handler)
    with pytest.raises(HttpRequestError) as exc:
        await client.get_json("https://example.test/missing")
    assert exc.value.status_code == 404
    assert len(calls) == 1

    with pytest.raises(HttpRequestError):
        await client.post_json("https://example.test/broadcast", {}, retry=False)
    assert len(calls) == 2
    await client.aclose()


@pytest.mark.asyncio
async def test_rpc_error_member_raises():
    """A JSON-RPC error member raises RpcError."""
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}})

    client = _client(handler)
    with pytest.raises(RpcError, match="boom"):
        await client.rpc_call("https://example.test/rpc", "eth_getBalance", ["0x0", "latest"])
    await client.aclose()


def test_redact_hides_api_key():
    """The Alchemy key path segment is masked in URLs."""
    redacted = redact("https://base-mainnet.g.alchemy.com/v2/secret-key")
    assert "secret-key" not in redacted
    assert "base-mainnet" in redacted


def test_redact_masks_key_inside_error_message():
    """Keys embedded in quoted URLs within exception text are masked too."""
    message = "401, message='Unauthorized', url='https://eth-mainnet.g.alchemy.com/v2/secret-key'"
    redacted = redact(message)
    assert "secret-key" not in redacted
    assert redacted.endswith("/v2/***'")
