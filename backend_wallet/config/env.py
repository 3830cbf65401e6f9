"""
Environment variable loading and validation for the wallet engine.

- CDP_API_KEY_ID / COINBASE_API_KEY_NAME: custody service API key id
- CDP_API_KEY_SECRET / COINBASE_PRIVATE_KEY: custody service API key secret
- CDP_WALLET_SECRET / COINBASE_WALLET_SECRET: custody wallet secret (signing)
- ALCHEMY_API_KEY: indexer + RPC key (all networks)
- COINGECKO_API_KEY: price oracle key (Pro API when set)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_wallet/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_wallet_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides the process env."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def get_env(*names: str, default: str = "") -> str:
    """
    Return the first non-empty value among the given variable names.

    Deployments use both the COINBASE_* and CDP_* spellings; lookups take
    aliases in priority order.
    """
    load_wallet_env()
    for name in names:
        raw = (os.getenv(name) or "").strip()
        if raw:
            return raw
    return default


def get_env_float(name: str, default: float) -> float:
    raw = get_env(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def get_env_int(name: str, default: int) -> int:
    raw = get_env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask a key for logs: keep the last few characters only."""
    if not value:
        return ""
    if len(value) <= visible:
        return "***"
    return "***" + value[-visible:]
