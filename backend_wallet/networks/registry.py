"""
Network registry — static table of supported EVM networks.

One immutable NetworkDescriptor per network: native asset, RPC and indexer
URL templates, block explorer, and the keys each price oracle uses for it.
Pure data; every other component depends on it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterator, Mapping

from backend_wallet.core.exceptions import ConfigurationError, ValidationError

NETWORK_BASE = "base"
NETWORK_ETHEREUM = "ethereum"
NETWORK_POLYGON = "polygon"
NETWORK_BASE_SEPOLIA = "base-sepolia"
NETWORK_ETHEREUM_SEPOLIA = "ethereum-sepolia"


@dataclass(frozen=True)
class NetworkDescriptor:
    """
    Static description of one network.

    `rpc_url_template` / `indexer_url_template` / `nft_api_url_template` carry
    a `{key}` placeholder for the indexer API key. `portfolio` is False for
    transfer-only networks (testnets) that are skipped by the read-path fan-out.
    """

    id: str
    chain_id: int
    native_symbol: str
    native_name: str
    native_decimals: int
    rpc_url_template: str
    indexer_url_template: str
    nft_api_url_template: str
    explorer_base_url: str
    price_platform_key: str
    native_price_id: str
    liquidity_venue_id: str
    portfolio: bool = True

    def rpc_url(self, api_key: str) -> str:
        return self.rpc_url_template.format(key=api_key)

    def indexer_url(self, api_key: str) -> str:
        return self.indexer_url_template.format(key=api_key)

    def nft_api_url(self, api_key: str) -> str:
        return self.nft_api_url_template.format(key=api_key)

    def explorer_tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_base_url.rstrip('/')}/tx/{tx_hash}"


def _alchemy(network: str, chain_id: int, native: tuple[str, str, str], explorer: str,
             platform: str, venue: str, *, portfolio: bool = True) -> NetworkDescriptor:
    symbol, name, price_id = native
    rpc = f"https://{network}.g.alchemy.com/v2/{{key}}"
    return NetworkDescriptor(
        id="",
        chain_id=chain_id,
        native_symbol=symbol,
        native_name=name,
        native_decimals=18,
        rpc_url_template=rpc,
        indexer_url_template=rpc,
        nft_api_url_template=f"https://{network}.g.alchemy.com/nft/v3/{{key}}",
        explorer_base_url=explorer,
        price_platform_key=platform,
        native_price_id=price_id,
        liquidity_venue_id=venue,
        portfolio=portfolio,
    )


_ETH = ("ETH", "Ethereum", "ethereum")

_DEFAULTS: dict[str, NetworkDescriptor] = {
    NETWORK_BASE: _alchemy("base-mainnet", 8453, _ETH, "https://basescan.org", "base", "base"),
    NETWORK_ETHEREUM: _alchemy("eth-mainnet", 1, _ETH, "https://etherscan.io", "ethereum", "ethereum"),
    NETWORK_POLYGON: _alchemy(
        "polygon-mainnet", 137, ("MATIC", "Polygon", "matic-network"),
        "https://polygonscan.com", "polygon-pos", "polygon",
    ),
    NETWORK_BASE_SEPOLIA: _alchemy(
        "base-sepolia", 84532, _ETH, "https://sepolia.basescan.org", "base", "base", portfolio=False,
    ),
    NETWORK_ETHEREUM_SEPOLIA: _alchemy(
        "eth-sepolia", 11155111, _ETH, "https://sepolia.etherscan.io", "ethereum", "ethereum", portfolio=False,
    ),
}


class NetworkRegistry:
    """Read-only lookup over NetworkDescriptors, in registration order."""

    def __init__(self, descriptors: Mapping[str, NetworkDescriptor]) -> None:
        if not descriptors:
            raise ValueError("registry needs at least one network")
        fixed = {}
        for network_id, desc in descriptors.items():
            if desc.id and desc.id != network_id:
                raise ValueError(f"descriptor id {desc.id!r} does not match key {network_id!r}")
            fixed[network_id] = desc if desc.id else _with_id(desc, network_id)
        self._networks = MappingProxyType(fixed)

    def __iter__(self) -> Iterator[NetworkDescriptor]:
        return iter(self._networks.values())

    def __len__(self) -> int:
        return len(self._networks)

    def __contains__(self, network_id: object) -> bool:
        return network_id in self._networks

    def ids(self) -> list[str]:
        return list(self._networks)

    def portfolio_networks(self) -> list[NetworkDescriptor]:
        """Networks included in balance / NFT / history fan-out."""
        return [n for n in self._networks.values() if n.portfolio]

    def get(self, network_id: str) -> NetworkDescriptor:
        """Return the descriptor or raise ValidationError for an unknown id."""
        key = (network_id or "").strip().lower()
        desc = self._networks.get(key)
        if desc is None:
            raise ValidationError(
                f"Unsupported network: {network_id!r}",
                details={"supported": self.ids()},
            )
        return desc


def _with_id(desc: NetworkDescriptor, network_id: str) -> NetworkDescriptor:
    return replace(desc, id=network_id)


def default_registry() -> NetworkRegistry:
    """Reference deployment: base, ethereum, polygon (+ transfer-only testnets)."""
    return NetworkRegistry(_DEFAULTS)


def require_api_key(api_key: str, service: str) -> str:
    """Raise ConfigurationError when a service key is missing (checked at call time)."""
    if not api_key:
        raise ConfigurationError(f"{service} API key not configured")
    return api_key
