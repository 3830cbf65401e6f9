"""
Balance aggregator — native + ERC-20 balances across portfolio networks.

Per network (concurrently, siblings never cancelled):
  1. native balance; included when non-zero
  2. indexer token balances; each non-zero contract is probed and dropped
     when the indexer says it is an NFT contract
  3. price + metadata via the resolution chain, metadata fallback from the
     indexer, 18 decimals as a last resort

A failed network is logged and left out; every network failing is an
UpstreamTotalFailure.
"""

from __future__ import annotations

import asyncio

from backend_wallet.aggregation.fanout import fan_out
from backend_wallet.aggregation.models import BalancesResult, TokenBalance
from backend_wallet.core.amounts import format_units, usd_value
from backend_wallet.indexer.alchemy import AlchemyIndexer
from backend_wallet.networks.registry import NetworkDescriptor, NetworkRegistry
from backend_wallet.pricing.oracles import PriceResult
from backend_wallet.pricing.resolver import PriceResolver
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

OPERATION = "FETCH_TOKENS_FAILED"
DEFAULT_TOKEN_DECIMALS = 18
UNKNOWN_SYMBOL = "UNKNOWN"
UNKNOWN_NAME = "Unknown Token"


def _sort_key(token: TokenBalance) -> tuple[float, str, str]:
    return (-token.usd_value, token.network, token.symbol)


class BalanceAggregator:
    def __init__(self, registry: NetworkRegistry, indexer: AlchemyIndexer, prices: PriceResolver) -> None:
        self._registry = registry
        self._indexer = indexer
        self._prices = prices

    async def get_balances(self, address: str) -> BalancesResult:
        self._indexer.require_configured()
        networks = self._registry.portfolio_networks()
        successes, failures = await fan_out(
            OPERATION, networks, lambda network: self._network_balances(network, address)
        )
        tokens = sorted((t for _, network_tokens in successes for t in network_tokens), key=_sort_key)
        total = sum(t.usd_value for t in tokens)
        logger.info(
            "balances_aggregated",
            address=address,
            tokens=len(tokens),
            total_usd_value=total,
            failed_networks=[f.network for f in failures],
        )
        return BalancesResult(
            tokens=tokens,
            total_usd_value=total,
            failed_networks=[f.network for f in failures],
        )

    async def _network_balances(self, network: NetworkDescriptor, address: str) -> list[TokenBalance]:
        native_raw, token_raws = await asyncio.gather(
            self._indexer.native_balance(network, address),
            self._indexer.token_balances(network, address),
        )
        tokens: list[TokenBalance] = []
        if native_raw > 0:
            tokens.append(await self._native_balance(network, native_raw))
        fungible = await asyncio.gather(
            *(self._token_balance(network, contract, raw) for contract, raw in token_raws)
        )
        tokens.extend(t for t in fungible if t is not None)
        return tokens

    async def _native_balance(self, network: NetworkDescriptor, raw: int) -> TokenBalance:
        price = await self._prices.resolve_price(network, None)
        formatted = format_units(raw, network.native_decimals)
        return TokenBalance(
            symbol=network.native_symbol,
            name=network.native_name,
            raw_amount=raw,
            decimals=network.native_decimals,
            formatted_amount=formatted,
            usd_price=price.usd_price,
            usd_value=usd_value(formatted, price.usd_price),
            contract_address=None,
            network=network.id,
            icon_url=price.icon,
        )

    async def _is_nft(self, network: NetworkDescriptor, contract: str) -> bool:
        try:
            return await self._indexer.is_nft_contract(network, contract)
        except Exception as e:
            # Unknown probe result: keep the token, a spam NFT has no price anyway
            logger.warning("nft_probe_failed", network=network.id, contract=contract, error=str(e))
            return False

    async def _token_balance(self, network: NetworkDescriptor, contract: str, raw: int) -> TokenBalance | None:
        if await self._is_nft(network, contract):
            logger.debug("nft_contract_excluded", network=network.id, contract=contract)
            return None
        price = await self._prices.resolve_price(network, contract)
        symbol, name, decimals, icon = await self._token_metadata(network, contract, price)
        formatted = format_units(raw, decimals)
        return TokenBalance(
            symbol=symbol,
            name=name,
            raw_amount=raw,
            decimals=decimals,
            formatted_amount=formatted,
            usd_price=price.usd_price,
            usd_value=usd_value(formatted, price.usd_price),
            contract_address=contract,
            network=network.id,
            icon_url=icon,
        )

    async def _token_metadata(
        self, network: NetworkDescriptor, contract: str, price: PriceResult
    ) -> tuple[str, str, int, str | None]:
        symbol, name, decimals, icon = price.symbol, price.name, price.decimals, price.icon
        if decimals is None or not symbol or not name:
            try:
                meta = await self._indexer.token_metadata(network, contract)
            except Exception as e:
                logger.warning("token_metadata_failed", network=network.id, contract=contract, error=str(e))
                meta = {}
            symbol = symbol or meta.get("symbol")
            name = name or meta.get("name")
            icon = icon or meta.get("logo")
            if decimals is None and isinstance(meta.get("decimals"), int) and meta["decimals"] >= 0:
                decimals = meta["decimals"]
        if decimals is None:
            decimals = DEFAULT_TOKEN_DECIMALS
        return symbol or UNKNOWN_SYMBOL, name or UNKNOWN_NAME, decimals, icon
