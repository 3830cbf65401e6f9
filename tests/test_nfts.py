"""Tests for NFT normalization and aggregation."""

from __future__ import annotations

import pytest

from backend_wallet.aggregation.nfts import normalize_nft, resolve_ipfs
from conftest import NFT_CONTRACT

OWNER = "0x00000000000000000000000000000000000000aa"


def _owned(token_id: str = "7", **overrides) -> dict:
    nft = {
        "contract": {"address": NFT_CONTRACT, "name": "Cool Cats", "symbol": "COOL", "tokenType": "ERC721"},
        "tokenId": token_id,
        "name": None,
        "description": "a cat",
        "image": {"cachedUrl": "https://cdn/cached.png", "originalUrl": "https://orig.png"},
        "raw": {"metadata": {"image": "ipfs://QmHash/7.png", "attributes": [{"trait_type": "hat", "value": "red"}]}},
        "balance": "1",
    }
    nft.update(overrides)
    return nft


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("ipfs://QmHash/1.png", "https://ipfs.io/ipfs/QmHash/1.png"),
        ("ipfs://ipfs/QmHash", "https://ipfs.io/ipfs/QmHash"),
        ("https://example.com/a.png", "https://example.com/a.png"),
        (None, ""),
    ],
)
def test_resolve_ipfs(uri, expected):
    """ipfs:// URIs are rewritten to the gateway; others pass through."""
    assert resolve_ipfs(uri) == expected


def test_normalize_prefers_metadata_image_and_synthesizes_name():
    """Metadata image wins and a missing name becomes "Collection #id"."""
    holding = normalize_nft("base", _owned())
    assert holding.image_url == "https://ipfs.io/ipfs/QmHash/7.png"
    assert holding.name == "Cool Cats #7"
    assert holding.collection_name == "Cool Cats"
    assert holding.token_type == "ERC721"
    assert holding.quantity == "1"
    assert holding.attributes == [{"trait_type": "hat", "value": "red"}]


def test_normalize_falls_back_through_image_sources_and_collection_names():
    """Thumbnail image and "Unknown Collection" fallbacks."""
    nft = _owned(raw={}, image={"thumbnailUrl": "https://thumb.png"}, contract={"address": NFT_CONTRACT})
    holding = normalize_nft("polygon", nft)
    assert holding.image_url == "https://thumb.png"
    assert holding.collection_name == "Unknown Collection"
    assert holding.token_type == "ERC721"
    assert holding.attributes == []

    nft = _owned(raw={}, image={"cachedUrl": "https://cached.png", "originalUrl": "https://orig.png"})
    assert normalize_nft("base", nft).image_url == "https://cached.png"


def test_custom_gateway():
    """A configured IPFS gateway is used for rewrites."""
    holding = normalize_nft("base", _owned(), "https://gw.example/ipfs")
    assert holding.image_url == "https://gw.example/ipfs/QmHash/7.png"


@pytest.mark.asyncio
async def test_get_nfts_across_networks_with_partial_failure(engine, upstream):
    """NFTs from healthy networks are returned when one network fails."""
    upstream.owned_nfts["base"] = [_owned("1"), _owned("2")]
    upstream.owned_nfts["polygon"] = [_owned("3", contract={"address": NFT_CONTRACT, "symbol": "PX", "tokenType": "ERC1155"}, balance="4")]
    upstream.failing.add("ethereum")

    result = await engine.nfts.get_nfts(OWNER)

    assert [(n.network, n.token_id) for n in result.nfts] == [("base", "1"), ("base", "2"), ("polygon", "3")]
    polygon = result.nfts[2]
    assert polygon.collection_name == "PX"
    assert polygon.token_type == "ERC1155"
    assert polygon.quantity == "4"
    assert result.failed_networks == ["ethereum"]
