"""NFT aggregator — owned NFTs across portfolio networks, normalized for display."""

from __future__ import annotations

from typing import Any

from backend_wallet.aggregation.fanout import fan_out
from backend_wallet.aggregation.models import NFTHolding, NFTsResult
from backend_wallet.indexer.alchemy import AlchemyIndexer
from backend_wallet.networks.registry import NetworkDescriptor, NetworkRegistry
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

OPERATION = "FETCH_NFTS_FAILED"
DEFAULT_IPFS_GATEWAY = "https://ipfs.io/ipfs/"
UNKNOWN_COLLECTION = "Unknown Collection"
DEFAULT_TOKEN_TYPE = "ERC721"


def resolve_ipfs(url: str | None, gateway: str = DEFAULT_IPFS_GATEWAY) -> str:
    """Rewrite ipfs:// (and ipfs://ipfs/) URIs onto an HTTP gateway; other URLs pass through."""
    if not url:
        return ""
    if url.startswith("ipfs://"):
        path = url[len("ipfs://"):]
        if path.startswith("ipfs/"):
            path = path[len("ipfs/"):]
        return gateway.rstrip("/") + "/" + path
    return url


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def pick_image(nft: dict[str, Any]) -> str | None:
    """metadata.image, then cachedUrl, originalUrl, thumbnailUrl."""
    metadata = _dict(_dict(nft.get("raw")).get("metadata"))
    image = _dict(nft.get("image"))
    for candidate in (
        metadata.get("image"),
        image.get("cachedUrl"),
        image.get("originalUrl"),
        image.get("thumbnailUrl"),
    ):
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def normalize_nft(network_id: str, nft: dict[str, Any], ipfs_gateway: str = DEFAULT_IPFS_GATEWAY) -> NFTHolding:
    contract = _dict(nft.get("contract"))
    metadata = _dict(_dict(nft.get("raw")).get("metadata"))
    token_id = str(nft.get("tokenId") or "")
    collection = contract.get("name") or contract.get("symbol") or UNKNOWN_COLLECTION
    name = metadata.get("name") or nft.get("name") or f"{collection} #{token_id}"
    attributes = metadata.get("attributes")
    token_type = contract.get("tokenType") or nft.get("tokenType") or DEFAULT_TOKEN_TYPE
    balance = nft.get("balance")
    return NFTHolding(
        network=network_id,
        contract_address=str(contract.get("address") or ""),
        token_id=token_id,
        name=str(name),
        description=str(metadata.get("description") or nft.get("description") or ""),
        image_url=resolve_ipfs(pick_image(nft), ipfs_gateway),
        collection_name=str(collection),
        token_type=str(token_type),
        quantity=str(balance) if balance is not None else None,
        attributes=attributes if isinstance(attributes, list) else [],
    )


class NFTAggregator:
    def __init__(
        self,
        registry: NetworkRegistry,
        indexer: AlchemyIndexer,
        ipfs_gateway: str = DEFAULT_IPFS_GATEWAY,
    ) -> None:
        self._registry = registry
        self._indexer = indexer
        self._ipfs_gateway = ipfs_gateway

    async def get_nfts(self, address: str) -> NFTsResult:
        self._indexer.require_configured()
        successes, failures = await fan_out(
            OPERATION,
            self._registry.portfolio_networks(),
            lambda network: self._network_nfts(network, address),
        )
        nfts = [nft for _, network_nfts in successes for nft in network_nfts]
        logger.info(
            "nfts_aggregated",
            address=address,
            nfts=len(nfts),
            failed_networks=[f.network for f in failures],
        )
        return NFTsResult(nfts=nfts, failed_networks=[f.network for f in failures])

    async def _network_nfts(self, network: NetworkDescriptor, address: str) -> list[NFTHolding]:
        owned = await self._indexer.nfts_for_owner(network, address)
        return [normalize_nft(network.id, nft, self._ipfs_gateway) for nft in owned]
