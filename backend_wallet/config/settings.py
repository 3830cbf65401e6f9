"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and .env files.
- Provide defaults for optional settings (timeouts, retries, cache TTL).
- Expose typed settings for the custody client, indexer, price oracles,
  aggregators, transfer executor and API server.

Missing credentials are not fatal here; the component that needs them raises
ConfigurationError at call time so the API can answer 503 for that route only.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from backend_wallet.config.env import (
    get_env,
    get_env_float,
    get_env_int,
    load_wallet_env,
)

DEFAULT_HTTP_TIMEOUT_SEC = 15.0
DEFAULT_HTTP_MAX_RETRIES = 3
DEFAULT_RETRY_MIN_DELAY_SEC = 0.5
DEFAULT_RETRY_MAX_DELAY_SEC = 8.0
DEFAULT_PRICE_CACHE_TTL_SEC = 60.0
DEFAULT_HISTORY_PAGE_SIZE = 50
DEFAULT_RECEIPT_TIMEOUT_SEC = 120.0
DEFAULT_IPFS_GATEWAY = "https://ipfs.io/ipfs/"


@dataclass(frozen=True)
class Settings:
    """Typed settings for all engine components."""

    cdp_api_key_id: str = ""
    cdp_api_key_secret: str = ""
    cdp_wallet_secret: str = ""
    alchemy_api_key: str = ""
    coingecko_api_key: str = ""
    http_timeout_sec: float = DEFAULT_HTTP_TIMEOUT_SEC
    http_max_retries: int = DEFAULT_HTTP_MAX_RETRIES
    retry_min_delay_sec: float = DEFAULT_RETRY_MIN_DELAY_SEC
    retry_max_delay_sec: float = DEFAULT_RETRY_MAX_DELAY_SEC
    price_cache_ttl_sec: float = DEFAULT_PRICE_CACHE_TTL_SEC
    history_page_size: int = DEFAULT_HISTORY_PAGE_SIZE
    receipt_timeout_sec: float = DEFAULT_RECEIPT_TIMEOUT_SEC
    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def has_custody_credentials(self) -> bool:
        return bool(self.cdp_api_key_id and self.cdp_api_key_secret and self.cdp_wallet_secret)

    @property
    def has_indexer_credentials(self) -> bool:
        return bool(self.alchemy_api_key)


def load_settings() -> Settings:
    """Build Settings from the current environment (no caching)."""
    load_wallet_env()
    page_size = get_env_int("HISTORY_PAGE_SIZE", DEFAULT_HISTORY_PAGE_SIZE)
    if not (1 <= page_size <= 1000):
        raise ValueError("HISTORY_PAGE_SIZE must be between 1 and 1000")
    return Settings(
        cdp_api_key_id=get_env("CDP_API_KEY_ID", "COINBASE_API_KEY_NAME"),
        cdp_api_key_secret=get_env("CDP_API_KEY_SECRET", "COINBASE_PRIVATE_KEY"),
        cdp_wallet_secret=get_env("CDP_WALLET_SECRET", "COINBASE_WALLET_SECRET"),
        alchemy_api_key=get_env("ALCHEMY_API_KEY"),
        coingecko_api_key=get_env("COINGECKO_API_KEY"),
        http_timeout_sec=get_env_float("HTTP_TIMEOUT_SEC", DEFAULT_HTTP_TIMEOUT_SEC),
        http_max_retries=max(1, get_env_int("HTTP_MAX_RETRIES", DEFAULT_HTTP_MAX_RETRIES)),
        retry_min_delay_sec=get_env_float("HTTP_RETRY_MIN_DELAY_SEC", DEFAULT_RETRY_MIN_DELAY_SEC),
        retry_max_delay_sec=get_env_float("HTTP_RETRY_MAX_DELAY_SEC", DEFAULT_RETRY_MAX_DELAY_SEC),
        price_cache_ttl_sec=get_env_float("PRICE_CACHE_TTL_SEC", DEFAULT_PRICE_CACHE_TTL_SEC),
        history_page_size=page_size,
        receipt_timeout_sec=get_env_float("RECEIPT_TIMEOUT_SEC", DEFAULT_RECEIPT_TIMEOUT_SEC),
        ipfs_gateway=get_env("IPFS_GATEWAY", default=DEFAULT_IPFS_GATEWAY),
        api_host=get_env("API_HOST", default="0.0.0.0"),
        api_port=get_env_int("API_PORT", 8000),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Cached for the process; tests build Settings directly instead of mutating env.
    """
    return load_settings()
