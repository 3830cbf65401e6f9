"""
History aggregator — asset transfers across portfolio networks.

Outgoing and incoming transfers are fetched per network, de-duplicated,
capped at the page size and merged into one list, newest first. Ties are
broken by network id then hash so the order is deterministic.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from backend_wallet.aggregation.fanout import fan_out
from backend_wallet.aggregation.models import HistoryResult, TransferRecord
from backend_wallet.core.amounts import format_units, parse_raw_amount
from backend_wallet.indexer.alchemy import DIRECTION_INCOMING, DIRECTION_OUTGOING, AlchemyIndexer
from backend_wallet.networks.registry import NetworkDescriptor, NetworkRegistry
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

OPERATION = "FETCH_HISTORY_FAILED"
DEFAULT_PAGE_SIZE = 50


def parse_timestamp_ms(value: Any) -> int:
    """ISO-8601 block timestamp -> epoch milliseconds; 0 when absent or malformed."""
    if not isinstance(value, str) or not value:
        return 0
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def parse_block_number(value: Any) -> int | None:
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return int(value, 16) if value.lower().startswith("0x") else int(value)
    except ValueError:
        return None


def transfer_value(transfer: dict[str, Any]) -> str:
    """
    Human amount of one transfer as a decimal string.

    Built from rawContract.value / rawContract.decimal when both are present,
    so no float formatting ever reaches the response. The float `value` is
    only a fallback, rendered in plain notation. NFT transfers have neither.
    """
    raw = transfer.get("rawContract") if isinstance(transfer.get("rawContract"), dict) else {}
    if raw.get("value") is not None and raw.get("decimal") is not None:
        try:
            return format_units(parse_raw_amount(raw["value"]), parse_raw_amount(raw["decimal"]))
        except ValueError:
            logger.debug("history_raw_value_unparsed", hash=transfer.get("hash"), raw=raw)
    value = transfer.get("value")
    if value is None or isinstance(value, bool):
        return "0"
    try:
        return format(Decimal(str(value)), "f")
    except InvalidOperation:
        return "0"


def to_record(network: NetworkDescriptor, transfer: dict[str, Any]) -> TransferRecord:
    tx_hash = str(transfer.get("hash") or "")
    metadata = transfer.get("metadata") if isinstance(transfer.get("metadata"), dict) else {}
    return TransferRecord(
        network=network.id,
        hash=tx_hash,
        from_address=str(transfer.get("from") or ""),
        to_address=transfer.get("to"),
        value=transfer_value(transfer),
        asset_symbol=str(transfer.get("asset") or network.native_symbol),
        category=str(transfer.get("category") or ""),
        timestamp_ms=parse_timestamp_ms(metadata.get("blockTimestamp")),
        block_number=parse_block_number(transfer.get("blockNum")),
        explorer_url=network.explorer_tx_url(tx_hash),
    )


def _dedupe_key(record: TransferRecord) -> tuple[str, str, str, str, str | None, str]:
    return (
        record.network,
        record.hash,
        record.category,
        record.from_address.lower(),
        record.to_address.lower() if record.to_address else None,
        record.value,
    )


def _sort_key(record: TransferRecord) -> tuple[int, str, str]:
    return (-record.timestamp_ms, record.network, record.hash)


def merge_records(records: list[TransferRecord], limit: int | None = None) -> list[TransferRecord]:
    """De-duplicate, sort newest first and optionally cap."""
    unique: dict[tuple[Any, ...], TransferRecord] = {}
    for record in records:
        unique.setdefault(_dedupe_key(record), record)
    merged = sorted(unique.values(), key=_sort_key)
    return merged[:limit] if limit is not None else merged


class HistoryAggregator:
    def __init__(
        self,
        registry: NetworkRegistry,
        indexer: AlchemyIndexer,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._registry = registry
        self._indexer = indexer
        self._page_size = page_size

    async def get_history(self, address: str) -> HistoryResult:
        self._indexer.require_configured()
        successes, failures = await fan_out(
            OPERATION,
            self._registry.portfolio_networks(),
            lambda network: self._network_history(network, address),
        )
        transactions = merge_records([r for _, records in successes for r in records])
        logger.info(
            "history_aggregated",
            address=address,
            transactions=len(transactions),
            failed_networks=[f.network for f in failures],
        )
        return HistoryResult(transactions=transactions, failed_networks=[f.network for f in failures])

    async def _network_history(self, network: NetworkDescriptor, address: str) -> list[TransferRecord]:
        outgoing, incoming = await asyncio.gather(
            self._indexer.asset_transfers(network, address, direction=DIRECTION_OUTGOING, max_count=self._page_size),
            self._indexer.asset_transfers(network, address, direction=DIRECTION_INCOMING, max_count=self._page_size),
        )
        records = [to_record(network, t) for t in outgoing + incoming]
        return merge_records(records, self._page_size)
