"""Tests for the network registry and AssetRef parsing."""

from __future__ import annotations

import pytest

from backend_wallet.core.exceptions import ConfigurationError, ValidationError
from backend_wallet.networks import default_registry
from backend_wallet.networks.assets import (
    FungibleAsset,
    NativeAsset,
    NonFungibleAsset,
    parse_nft,
    parse_token,
    require_uint,
)
from backend_wallet.networks.registry import require_api_key

USDC_BASE = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def test_default_registry_portfolio_networks():
    """The default registry lists base, ethereum and polygon for portfolios."""
    registry = default_registry()
    assert [n.id for n in registry.portfolio_networks()] == ["base", "ethereum", "polygon"]
    assert "base-sepolia" in registry
    assert registry.get("base").chain_id == 8453
    assert registry.get("polygon").native_symbol == "MATIC"


def test_registry_rejects_unknown_network():
    """Unknown network ids raise ValidationError listing the supported ones."""
    with pytest.raises(ValidationError) as exc:
        default_registry().get("solana")
    assert "base" in exc.value.details["supported"]


def test_urls_and_explorer():
    """RPC, NFT API and explorer URLs for a network."""
    base = default_registry().get("base")
    assert base.rpc_url("k") == "https://base-mainnet.g.alchemy.com/v2/k"
    assert base.nft_api_url("k") == "https://base-mainnet.g.alchemy.com/nft/v3/k"
    assert base.explorer_tx_url("0xabc") == "https://basescan.org/tx/0xabc"


def test_require_api_key():
    """An empty API key raises ConfigurationError."""
    assert require_api_key("abc", "Alchemy") == "abc"
    with pytest.raises(ConfigurationError, match="Alchemy API key not configured"):
        require_api_key("", "Alchemy")


def test_parse_token_native_alias_and_contract():
    """Native markers, aliases and contract addresses map to AssetRefs."""
    base = default_registry().get("base")
    polygon = default_registry().get("polygon")
    assert parse_token("eth", base) == NativeAsset(symbol="ETH")
    assert parse_token("MATIC", polygon) == NativeAsset(symbol="MATIC")
    usdc = parse_token("USDC", base)
    assert usdc == FungibleAsset(contract_address=USDC_BASE, alias="usdc")
    assert usdc.custody_token == "usdc"
    raw = parse_token(USDC_BASE.lower(), base)
    assert raw.contract_address == USDC_BASE
    assert raw.custody_token == USDC_BASE


@pytest.mark.parametrize("token", ["", "doge", "0x1234"])
def test_parse_token_rejects(token):
    """Empty, unknown and malformed token values are rejected."""
    with pytest.raises(ValidationError):
        parse_token(token, default_registry().get("base"))


def test_parse_nft():
    """Contract and token id parse into a NonFungibleAsset."""
    nft = parse_nft("0x1111111111111111111111111111111111111111", "42")
    assert nft == NonFungibleAsset(contract_address="0x1111111111111111111111111111111111111111", token_id=42)
    assert parse_nft("0x1111111111111111111111111111111111111111", "0").token_id == 0


@pytest.mark.parametrize("value", ["0", "1.5", "-1", "1e18", ""])
def test_require_uint_positive_rejects(value):
    """Zero, fractions, negatives, exponents and blanks are not valid amounts."""
    with pytest.raises(ValidationError):
        require_uint(value, "amount", positive=True)
