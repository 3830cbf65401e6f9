"""
Indexer client (Alchemy) — enriched queries beyond raw RPC.

JSON-RPC on the network RPC URL: eth_getBalance, alchemy_getTokenBalances,
alchemy_getTokenMetadata, alchemy_getAssetTransfers.
REST on the NFT API URL: getNFTsForOwner, getNFTsForContract (NFT probe).

All calls are idempotent reads and go through JsonHttpClient retry/backoff.
"""

from __future__ import annotations

from typing import Any

from backend_wallet.core.amounts import parse_raw_amount
from backend_wallet.core.http import HttpRequestError, JsonHttpClient
from backend_wallet.networks.registry import NetworkDescriptor, require_api_key
from backend_wallet.pricing.cache import TTLCache
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

TOKEN_BALANCE_MAX_PAGES = 10
NFT_PAGE_SIZE = 100
NFT_MAX_PAGES = 5
TRANSFER_CATEGORIES = ("external", "erc20", "erc721", "erc1155")

DIRECTION_OUTGOING = "fromAddress"
DIRECTION_INCOMING = "toAddress"


class AlchemyIndexer:
    """Per-network indexer queries; the API key is checked at call time."""

    def __init__(self, http: JsonHttpClient, api_key: str, probe_cache: TTLCache) -> None:
        self._http = http
        self._api_key = api_key
        self._probe_cache = probe_cache

    def _rpc_url(self, network: NetworkDescriptor) -> str:
        return network.indexer_url(require_api_key(self._api_key, "Alchemy"))

    def _nft_url(self, network: NetworkDescriptor) -> str:
        return network.nft_api_url(require_api_key(self._api_key, "Alchemy"))

    def require_configured(self) -> None:
        require_api_key(self._api_key, "Alchemy")

    async def native_balance(self, network: NetworkDescriptor, address: str) -> int:
        result = await self._http.rpc_call(self._rpc_url(network), "eth_getBalance", [address, "latest"])
        return parse_raw_amount(result)

    async def token_balances(self, network: NetworkDescriptor, address: str) -> list[tuple[str, int]]:
        """Return (contract_address, raw_balance) for every non-zero ERC-20 balance."""
        url = self._rpc_url(network)
        balances: list[tuple[str, int]] = []
        page_key: str | None = None
        for _ in range(TOKEN_BALANCE_MAX_PAGES):
            options: dict[str, Any] = {"pageKey": page_key} if page_key else {}
            params: list[Any] = [address, "erc20", options] if options else [address, "erc20"]
            result = await self._http.rpc_call(url, "alchemy_getTokenBalances", params) or {}
            for entry in result.get("tokenBalances") or []:
                contract = entry.get("contractAddress")
                if not contract or entry.get("error"):
                    continue
                try:
                    raw = parse_raw_amount(entry.get("tokenBalance"))
                except ValueError:
                    logger.debug("indexer_bad_token_balance", network=network.id, contract=contract)
                    continue
                if raw > 0:
                    balances.append((contract, raw))
            page_key = result.get("pageKey")
            if not page_key:
                break
        return balances

    async def token_metadata(self, network: NetworkDescriptor, contract_address: str) -> dict[str, Any]:
        """{decimals, symbol, name, logo}; values may be None."""
        cache_key = ("metadata", network.id, contract_address.lower())
        cached = self._probe_cache.get(cache_key)
        if cached is not None:
            return cached
        result = await self._http.rpc_call(
            self._rpc_url(network), "alchemy_getTokenMetadata", [contract_address]
        ) or {}
        self._probe_cache.set(cache_key, result)
        return result

    async def is_nft_contract(self, network: NetworkDescriptor, contract_address: str) -> bool:
        """
        Probe whether a contract is NFT-typed by asking for one of its tokens.

        A 4xx answer means the indexer does not treat it as an NFT contract.
        Transport / 5xx failures propagate; the caller picks the failure mode.
        """
        cache_key = ("nft_probe", network.id, contract_address.lower())
        cached = self._probe_cache.get(cache_key)
        if cached is not None:
            return cached
        try:
            data = await self._http.get_json(
                f"{self._nft_url(network)}/getNFTsForContract",
                params={"contractAddress": contract_address, "withMetadata": "false", "limit": 1},
            )
        except HttpRequestError as e:
            if e.status_code is not None and 400 <= e.status_code < 500 and e.status_code != 429:
                self._probe_cache.set(cache_key, False)
                return False
            raise
        is_nft = bool((data or {}).get("nfts")) if isinstance(data, dict) else False
        self._probe_cache.set(cache_key, is_nft)
        return is_nft

    async def nfts_for_owner(self, network: NetworkDescriptor, address: str) -> list[dict[str, Any]]:
        url = f"{self._nft_url(network)}/getNFTsForOwner"
        owned: list[dict[str, Any]] = []
        page_key: str | None = None
        for _ in range(NFT_MAX_PAGES):
            params: dict[str, Any] = {"owner": address, "withMetadata": "true", "pageSize": NFT_PAGE_SIZE}
            if page_key:
                params["pageKey"] = page_key
            data = await self._http.get_json(url, params=params) or {}
            owned.extend(n for n in data.get("ownedNfts") or [] if isinstance(n, dict))
            page_key = data.get("pageKey")
            if not page_key:
                break
        return owned

    async def asset_transfers(
        self,
        network: NetworkDescriptor,
        address: str,
        *,
        direction: str,
        max_count: int,
    ) -> list[dict[str, Any]]:
        """Most recent transfers first, native + ERC-20 + NFT categories in one request."""
        params = {
            "fromBlock": "0x0",
            "toBlock": "latest",
            direction: address,
            "category": list(TRANSFER_CATEGORIES),
            "withMetadata": True,
            "excludeZeroValue": False,
            "order": "desc",
            "maxCount": hex(max_count),
        }
        result = await self._http.rpc_call(self._rpc_url(network), "alchemy_getAssetTransfers", [params]) or {}
        return [t for t in result.get("transfers") or [] if isinstance(t, dict)]
