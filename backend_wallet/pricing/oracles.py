"""
Price oracle backends.

- CoinGeckoOracle: native-asset prices (simple/price) and contract metadata +
  price (coins/{platform}/contract/{address}). Pro API when a key is set,
  public API otherwise.
- DexScreenerOracle: liquidity-pool price for a contract, accepting only pairs
  on the requested network's venue id.

Backends raise on failure; the resolver decides what a failure means.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend_wallet.core.http import JsonHttpClient

COINGECKO_PRO_URL = "https://pro-api.coingecko.com/api/v3"
COINGECKO_PUBLIC_URL = "https://api.coingecko.com/api/v3"
DEXSCREENER_URL = "https://api.dexscreener.com/latest/dex"

SOURCE_COINGECKO = "coingecko"
SOURCE_DEXSCREENER = "dexscreener"
SOURCE_NONE = "none"


@dataclass(frozen=True)
class PriceResult:
    """USD price plus whatever metadata the oracle returned. usd_price 0.0 means unknown."""

    usd_price: float = 0.0
    icon: str | None = None
    name: str | None = None
    symbol: str | None = None
    decimals: int | None = None
    source: str = SOURCE_NONE

    @property
    def known(self) -> bool:
        return self.usd_price > 0


UNKNOWN_PRICE = PriceResult()


def _positive_float(value: Any) -> float:
    """Parse a price; anything non-numeric, non-finite or negative is 0.0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number in (float("inf"), float("-inf")) or number < 0:
        return 0.0
    return number


class CoinGeckoOracle:
    """CoinGecko REST client for native and contract prices."""

    def __init__(self, http: JsonHttpClient, api_key: str = "") -> None:
        self._http = http
        self._api_key = api_key
        self._base_url = COINGECKO_PRO_URL if api_key else COINGECKO_PUBLIC_URL

    def _headers(self) -> dict[str, str]:
        return {"x-cg-pro-api-key": self._api_key} if self._api_key else {}

    async def native_price(self, price_id: str) -> float:
        data = await self._http.get_json(
            f"{self._base_url}/simple/price",
            params={"ids": price_id, "vs_currencies": "usd"},
            headers=self._headers(),
        )
        if not isinstance(data, dict):
            return 0.0
        return _positive_float((data.get(price_id) or {}).get("usd"))

    async def contract_info(self, platform: str, contract_address: str) -> PriceResult | None:
        """Return price + metadata, or None when CoinGecko has no usable entry."""
        data = await self._http.get_json(
            f"{self._base_url}/coins/{platform}/contract/{contract_address.lower()}",
            headers=self._headers(),
        )
        if not isinstance(data, dict) or data.get("error"):
            return None
        price = _positive_float(((data.get("market_data") or {}).get("current_price") or {}).get("usd"))
        detail = (data.get("detail_platforms") or {}).get(platform) or {}
        decimals = detail.get("decimal_place")
        symbol = data.get("symbol")
        return PriceResult(
            usd_price=price,
            icon=(data.get("image") or {}).get("small"),
            name=data.get("name") or None,
            symbol=symbol.upper() if isinstance(symbol, str) and symbol else None,
            decimals=int(decimals) if isinstance(decimals, int) else None,
            source=SOURCE_COINGECKO,
        )


class DexScreenerOracle:
    """DexScreener token-pairs lookup; picks the deepest pair on the right chain."""

    def __init__(self, http: JsonHttpClient) -> None:
        self._http = http

    async def token_info(self, venue_id: str, contract_address: str) -> PriceResult | None:
        data = await self._http.get_json(f"{DEXSCREENER_URL}/tokens/{contract_address}")
        pairs = (data.get("pairs") or []) if isinstance(data, dict) else []
        wanted = contract_address.lower()
        candidates = [
            p for p in pairs
            if isinstance(p, dict)
            and p.get("chainId") == venue_id
            and str((p.get("baseToken") or {}).get("address", "")).lower() == wanted
        ]
        if not candidates:
            return None
        best = max(candidates, key=lambda p: _positive_float((p.get("liquidity") or {}).get("usd")))
        price = _positive_float(best.get("priceUsd"))
        if not price:
            return None
        base = best.get("baseToken") or {}
        symbol = base.get("symbol")
        return PriceResult(
            usd_price=price,
            icon=(best.get("info") or {}).get("imageUrl"),
            name=base.get("name") or None,
            symbol=symbol.upper() if isinstance(symbol, str) and symbol else None,
            source=SOURCE_DEXSCREENER,
        )
