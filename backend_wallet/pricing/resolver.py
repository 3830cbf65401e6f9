"""
Price resolution chain.

resolve_price(network, contract_address | None) never raises:

1. native asset -> CoinGecko simple price by the network's native price id;
2. contract -> CoinGecko contract endpoint (price + icon/name/symbol/decimals);
3. miss or failure -> DexScreener pair on the network's venue id;
4. both fail -> PriceResult(usd_price=0.0), which callers treat as "unknown".

Results are cached per (network, contract) with a TTL, misses included.
"""

from __future__ import annotations

from dataclasses import replace

from backend_wallet.networks.registry import NetworkDescriptor
from backend_wallet.pricing.cache import TTLCache
from backend_wallet.pricing.oracles import (
    SOURCE_COINGECKO,
    UNKNOWN_PRICE,
    CoinGeckoOracle,
    DexScreenerOracle,
    PriceResult,
)
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

_NATIVE_KEY = "native"


class PriceResolver:
    """Ordered oracle chain with a shared TTL cache."""

    def __init__(
        self,
        coingecko: CoinGeckoOracle,
        dexscreener: DexScreenerOracle,
        cache: TTLCache,
    ) -> None:
        self._coingecko = coingecko
        self._dexscreener = dexscreener
        self._cache = cache

    async def resolve_price(self, network: NetworkDescriptor, contract_address: str | None) -> PriceResult:
        key = (network.id, contract_address.lower() if contract_address else _NATIVE_KEY)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        if contract_address is None:
            result = await self._resolve_native(network)
        else:
            result = await self._resolve_contract(network, contract_address)
        self._cache.set(key, result)
        return result

    async def _resolve_native(self, network: NetworkDescriptor) -> PriceResult:
        try:
            price = await self._coingecko.native_price(network.native_price_id)
        except Exception as e:
            logger.warning(
                "price_native_failed",
                network=network.id,
                price_id=network.native_price_id,
                error=str(e),
            )
            return UNKNOWN_PRICE
        return PriceResult(
            usd_price=price,
            name=network.native_name,
            symbol=network.native_symbol,
            decimals=network.native_decimals,
            source=SOURCE_COINGECKO if price else UNKNOWN_PRICE.source,
        )

    async def _resolve_contract(self, network: NetworkDescriptor, contract_address: str) -> PriceResult:
        primary: PriceResult | None = None
        try:
            primary = await self._coingecko.contract_info(network.price_platform_key, contract_address)
        except Exception as e:
            logger.debug(
                "price_primary_failed",
                network=network.id,
                contract=contract_address,
                error=str(e),
            )
        if primary is not None and primary.known:
            return primary

        secondary: PriceResult | None = None
        try:
            secondary = await self._dexscreener.token_info(network.liquidity_venue_id, contract_address)
        except Exception as e:
            logger.debug(
                "price_secondary_failed",
                network=network.id,
                contract=contract_address,
                error=str(e),
            )
        if secondary is not None and secondary.known:
            if primary is not None:
                # Keep CoinGecko metadata (decimals, icon) when only its price was missing
                return replace(
                    secondary,
                    icon=primary.icon or secondary.icon,
                    name=primary.name or secondary.name,
                    symbol=primary.symbol or secondary.symbol,
                    decimals=primary.decimals,
                )
            return secondary

        logger.debug("price_unknown", network=network.id, contract=contract_address)
        # Metadata without a price is still useful for display
        if primary is not None:
            return replace(primary, usd_price=0.0)
        return UNKNOWN_PRICE
