"""
Asset references — closed tagged variant over what a transfer moves.

    AssetRef = NativeAsset | FungibleAsset(contract, alias?) | NonFungibleAsset(contract, token_id)

parse_token() turns the wire `token` field (native marker, well-known alias or
0x contract address) into an AssetRef once, at the edge, so nothing
downstream sniffs strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from eth_utils import is_address, to_checksum_address

from backend_wallet.core.exceptions import ValidationError
from backend_wallet.networks.registry import NetworkDescriptor

# Marker the custody service uses for the native asset on every network
NATIVE_MARKER = "eth"
NATIVE_ALIASES = frozenset({NATIVE_MARKER, "native"})

ALIAS_USDC = "usdc"

# Well-known aliases the custody service understands directly, with the
# contract used when the transfer falls back to local signing.
WELL_KNOWN_TOKENS: dict[str, dict[str, str]] = {
    ALIAS_USDC: {
        "base": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        "ethereum": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        "polygon": "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
        "base-sepolia": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
        "ethereum-sepolia": "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
    },
}

_UINT_RE = re.compile(r"^[0-9]+$")
UINT256_MAX = 2**256 - 1


@dataclass(frozen=True)
class NativeAsset:
    symbol: str

    @property
    def custody_token(self) -> str:
        return NATIVE_MARKER


@dataclass(frozen=True)
class FungibleAsset:
    contract_address: str
    alias: str | None = None

    @property
    def custody_token(self) -> str:
        return self.alias or self.contract_address


@dataclass(frozen=True)
class NonFungibleAsset:
    contract_address: str
    token_id: int


AssetRef = Union[NativeAsset, FungibleAsset, NonFungibleAsset]


def require_address(value: str, field_name: str) -> str:
    """Validate an EVM address and return it checksummed; ValidationError otherwise."""
    text = (value or "").strip()
    if not text.startswith("0x") or not is_address(text):
        raise ValidationError(f"{field_name} must be a 0x-prefixed 20-byte address")
    return to_checksum_address(text)


def require_uint(value: str | int, field_name: str, *, positive: bool) -> int:
    """Parse a base-10 unsigned integer string (no floats on the wire)."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer string")
    text = str(value).strip()
    if not _UINT_RE.match(text):
        raise ValidationError(f"{field_name} must be a base-10 integer string in smallest units")
    number = int(text)
    if positive and number <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    if number > UINT256_MAX:
        raise ValidationError(f"{field_name} does not fit in a uint256")
    return number


def parse_token(token: str, network: NetworkDescriptor) -> NativeAsset | FungibleAsset:
    """
    Classify the wire `token` field for a network.

    Native: the custody marker, "native", or the network's native symbol (e.g. "matic").
    Alias: a WELL_KNOWN_TOKENS key available on that network.
    Otherwise: must be a 0x contract address.
    """
    raw = (token or "").strip()
    if not raw:
        raise ValidationError("token is required")
    lowered = raw.lower()
    if lowered in NATIVE_ALIASES or lowered == network.native_symbol.lower():
        return NativeAsset(symbol=network.native_symbol)
    known = WELL_KNOWN_TOKENS.get(lowered)
    if known is not None:
        contract = known.get(network.id)
        if contract is None:
            raise ValidationError(f"{raw.upper()} is not available on {network.id}")
        return FungibleAsset(contract_address=contract, alias=lowered)
    if lowered.startswith("0x"):
        return FungibleAsset(contract_address=require_address(raw, "token"))
    raise ValidationError(
        f"Unknown token {raw!r}: use {NATIVE_MARKER!r}, a known alias ({', '.join(sorted(WELL_KNOWN_TOKENS))}) "
        "or a 0x contract address"
    )


def parse_nft(contract_address: str, token_id: str | int) -> NonFungibleAsset:
    return NonFungibleAsset(
        contract_address=require_address(contract_address, "contractAddress"),
        token_id=require_uint(token_id, "tokenId", positive=False),
    )
