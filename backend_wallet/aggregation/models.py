"""
Read-path data models: token balances, NFT holdings, transfer records.

Transient values rebuilt on every call from live indexer / oracle state.
to_dict() produces the camelCase wire shape used by the API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TokenBalance:
    """
    One asset balance on one network. contract_address None means native.

    usd_value == formatted_amount * usd_price; both are 0.0 when the price is unknown.
    """

    symbol: str
    name: str
    raw_amount: int
    decimals: int
    formatted_amount: str
    usd_price: float
    usd_value: float
    contract_address: str | None
    network: str
    icon_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "rawAmount": str(self.raw_amount),
            "decimals": self.decimals,
            "formattedAmount": self.formatted_amount,
            "usdPrice": self.usd_price,
            "usdValue": self.usd_value,
            "priceKnown": self.usd_price > 0,
            "contractAddress": self.contract_address,
            "network": self.network,
            "iconUrl": self.icon_url,
        }


@dataclass(frozen=True)
class NFTHolding:
    network: str
    contract_address: str
    token_id: str
    name: str
    description: str
    image_url: str
    collection_name: str
    token_type: str
    quantity: str | None
    attributes: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "contractAddress": self.contract_address,
            "tokenId": self.token_id,
            "name": self.name,
            "description": self.description,
            "imageUrl": self.image_url,
            "collectionName": self.collection_name,
            "tokenType": self.token_type,
            "quantity": self.quantity,
            "attributes": list(self.attributes),
        }


@dataclass(frozen=True)
class TransferRecord:
    network: str
    hash: str
    from_address: str
    to_address: str | None
    value: str
    asset_symbol: str
    category: str
    timestamp_ms: int
    block_number: int | None
    explorer_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "hash": self.hash,
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
            "assetSymbol": self.asset_symbol,
            "category": self.category,
            "timestampMs": self.timestamp_ms,
            "blockNumber": self.block_number,
            "explorerUrl": self.explorer_url,
        }


@dataclass(frozen=True)
class BalancesResult:
    tokens: list[TokenBalance]
    total_usd_value: float
    failed_networks: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NFTsResult:
    nfts: list[NFTHolding]
    failed_networks: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class HistoryResult:
    transactions: list[TransferRecord]
    failed_networks: list[str] = field(default_factory=list)
