"""
WalletEngine — the wired-up set of engine components for one process.

Built once from Settings by the API lifespan and held on app.state. Tests
build it with a fake custody service, an httpx.MockTransport and a fake chain
client factory instead of touching the network.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from backend_wallet.aggregation import BalanceAggregator, HistoryAggregator, NFTAggregator
from backend_wallet.config.env import mask_secret
from backend_wallet.config.settings import Settings
from backend_wallet.core.http import JsonHttpClient
from backend_wallet.custody import AccountProvisioner, CdpCustodyService, CustodyService
from backend_wallet.indexer import AlchemyIndexer
from backend_wallet.networks import NetworkRegistry, default_registry
from backend_wallet.pricing import PriceResolver
from backend_wallet.pricing.cache import TTLCache
from backend_wallet.pricing.oracles import CoinGeckoOracle, DexScreenerOracle
from backend_wallet.transfers import LocalSigningPath, PrimaryCustodyPath, TransferExecutor
from backend_wallet.transfers.chain import Web3ChainClients
from backend_wallet.transfers.paths import ChainClientFactory
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)


@dataclass
class WalletEngine:
    settings: Settings
    registry: NetworkRegistry
    http: JsonHttpClient
    custody: CustodyService
    provisioner: AccountProvisioner
    prices: PriceResolver
    balances: BalanceAggregator
    nfts: NFTAggregator
    history: HistoryAggregator
    transfers: TransferExecutor
    owned_chains: Web3ChainClients | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        registry: NetworkRegistry | None = None,
        custody: CustodyService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        chains: ChainClientFactory | None = None,
    ) -> "WalletEngine":
        registry = registry or default_registry()
        http = JsonHttpClient(
            timeout_sec=settings.http_timeout_sec,
            max_retries=settings.http_max_retries,
            min_retry_delay_sec=settings.retry_min_delay_sec,
            max_retry_delay_sec=settings.retry_max_delay_sec,
            transport=transport,
        )
        custody = custody or CdpCustodyService(settings)
        provisioner = AccountProvisioner(
            custody,
            max_retries=settings.http_max_retries,
            min_retry_delay_sec=settings.retry_min_delay_sec,
            max_retry_delay_sec=settings.retry_max_delay_sec,
        )
        prices = PriceResolver(
            CoinGeckoOracle(http, settings.coingecko_api_key),
            DexScreenerOracle(http),
            TTLCache(settings.price_cache_ttl_sec),
        )
        indexer = AlchemyIndexer(http, settings.alchemy_api_key, TTLCache(settings.price_cache_ttl_sec))
        owned_chains = None
        if chains is None:
            chains = owned_chains = Web3ChainClients(settings.alchemy_api_key, settings.http_timeout_sec)
        local = LocalSigningPath(custody, chains, settings.receipt_timeout_sec)
        engine = cls(
            settings=settings,
            registry=registry,
            http=http,
            custody=custody,
            provisioner=provisioner,
            prices=prices,
            balances=BalanceAggregator(registry, indexer, prices),
            nfts=NFTAggregator(registry, indexer, settings.ipfs_gateway),
            history=HistoryAggregator(registry, indexer, settings.history_page_size),
            transfers=TransferExecutor(provisioner, [PrimaryCustodyPath(custody), local], local),
            owned_chains=owned_chains,
        )
        logger.info(
            "wallet_engine_ready",
            networks=registry.ids(),
            custody_configured=settings.has_custody_credentials,
            indexer_configured=settings.has_indexer_credentials,
            alchemy_key=mask_secret(settings.alchemy_api_key),
        )
        return engine

    async def aclose(self) -> None:
        await self.http.aclose()
        await self.custody.close()
        if self.owned_chains is not None:
            await self.owned_chains.aclose()
