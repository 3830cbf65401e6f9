"""Tests for merged, time-ordered transfer history."""

from __future__ import annotations

import pytest

from backend_wallet.aggregation.history import (
    merge_records,
    parse_block_number,
    parse_timestamp_ms,
    to_record,
    transfer_value,
)
from backend_wallet.networks import default_registry

OWNER = "0x00000000000000000000000000000000000000aa"
OTHER = "0x00000000000000000000000000000000000000bb"


def _transfer(tx_hash: str, ts: str, *, frm: str = OWNER, to: str = OTHER, value=0.5, asset="ETH") -> dict:
    return {
        "hash": tx_hash,
        "from": frm,
        "to": to,
        "value": value,
        "asset": asset,
        "category": "external",
        "blockNum": "0x10",
        "metadata": {"blockTimestamp": ts},
    }


def test_parse_helpers():
    """Timestamp and block number parsing, including malformed input."""
    assert parse_timestamp_ms("2024-01-01T00:00:00.000Z") == 1704067200000
    assert parse_timestamp_ms(None) == 0
    assert parse_timestamp_ms("yesterday") == 0
    assert parse_block_number("0x10") == 16
    assert parse_block_number(None) is None


def test_to_record_fields():
    """Missing asset and value fall back to the native symbol and "0"."""
    base = default_registry().get("base")
    record = to_record(base, _transfer("0xaa", "2024-01-01T00:00:00Z", asset=None, value=None))
    assert record.asset_symbol == "ETH"
    assert record.value == "0"
    assert record.block_number == 16
    assert record.explorer_url == "https://basescan.org/tx/0xaa"
    assert record.to_dict()["from"] == OWNER


def test_transfer_value_prefers_raw_contract():
    """The amount string comes from rawContract, not from float formatting."""
    transfer = _transfer("0xab", "2024-01-01T00:00:00Z", value=1e-05)
    transfer["rawContract"] = {"value": "0x2540be400", "decimal": "0x12", "address": None}
    assert transfer_value(transfer) == "0.00000001"

    transfer["rawContract"] = {"value": "0x989680", "decimal": "0x6"}
    assert transfer_value(transfer) == "10"


def test_transfer_value_float_fallback_is_plain_notation():
    """Without rawContract the float is rendered without exponent notation."""
    assert transfer_value(_transfer("0xac", "2024-01-01T00:00:00Z", value=1e-05)) == "0.00001"
    assert transfer_value({"rawContract": {"value": None, "decimal": None}, "value": None}) == "0"


def test_merge_dedupes_sorts_and_caps():
    """Duplicates are dropped, newest first, ties broken by network then hash."""
    base = default_registry().get("base")
    eth = default_registry().get("ethereum")
    records = [
        to_record(base, _transfer("0x01", "2024-01-01T00:00:00Z")),
        to_record(eth, _transfer("0x02", "2024-01-03T00:00:00Z")),
        to_record(base, _transfer("0x03", "2024-01-02T00:00:00Z")),
        to_record(base, _transfer("0x01", "2024-01-01T00:00:00Z")),
        to_record(eth, _transfer("0x00", "2024-01-02T00:00:00Z")),
    ]
    merged = merge_records(records)
    assert [(r.network, r.hash) for r in merged] == [
        ("ethereum", "0x02"),
        ("base", "0x03"),
        ("ethereum", "0x00"),
        ("base", "0x01"),
    ]
    assert len(merge_records(records, 2)) == 2


@pytest.mark.asyncio
async def test_history_interleaves_networks_newest_first(engine, upstream):
    """History from several networks is merged into one time-ordered list."""
    upstream.transfers["base"] = {
        "fromAddress": [_transfer("0xb2", "2024-03-04T00:00:00Z"), _transfer("0xb1", "2024-03-01T00:00:00Z")],
        "toAddress": [_transfer("0xb3", "2024-03-03T00:00:00Z", frm=OTHER, to=OWNER)],
    }
    upstream.transfers["polygon"] = {
        "fromAddress": [_transfer("0xp1", "2024-03-02T00:00:00Z", asset="MATIC")],
    }

    result = await engine.history.get_history(OWNER)

    hashes = [t.hash for t in result.transactions]
    assert hashes == ["0xb2", "0xb3", "0xp1", "0xb1"]
    stamps = [t.timestamp_ms for t in result.transactions]
    assert stamps == sorted(stamps, reverse=True)


@pytest.mark.asyncio
async def test_history_requests_both_directions_with_page_size(engine, upstream):
    """Outgoing and incoming transfers are both requested with the page size."""
    import json

    await engine.history.get_history(OWNER)
    bodies = [
        json.loads(r.content)
        for r in upstream.requests
        if r.url.host.startswith("base-mainnet") and r.method == "POST"
    ]
    options = [b["params"][0] for b in bodies if b["method"] == "alchemy_getAssetTransfers"]
    assert {("fromAddress" in o, "toAddress" in o) for o in options} == {(True, False), (False, True)}
    assert all(o["maxCount"] == "0x32" and o["order"] == "desc" for o in options)


@pytest.mark.asyncio
async def test_history_total_failure(engine, upstream):
    """Every network failing maps to FETCH_HISTORY_FAILED."""
    from backend_wallet.core.exceptions import UpstreamTotalFailure

    upstream.failing.update({"base", "ethereum", "polygon"})
    with pytest.raises(UpstreamTotalFailure) as exc:
        await engine.history.get_history(OWNER)
    assert exc.value.code == "FETCH_HISTORY_FAILED"
