"""
Custody service client — the only component that talks to the key holder.

CustodyService is the narrow contract the engine depends on:
get_or_create_account, transfer (custody-side sign + broadcast) and
sign_transaction (custody-side signing of a locally built transaction).

CdpCustodyService implements it over the Coinbase CDP SDK. It is constructed
explicitly and injected; tests substitute an in-memory fake.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Protocol

from backend_wallet.config.settings import Settings
from backend_wallet.core.exceptions import CustodyUnavailable
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)


class CustodyService(Protocol):
    async def get_or_create_account(self, name: str) -> str:
        """Return the account address for a logical name, creating it on first use."""

    async def transfer(self, name: str, network: str, to: str, token: str, amount: int) -> str:
        """Sign and broadcast a transfer custody-side; return the transaction hash."""

    async def sign_transaction(self, name: str, transaction: dict[str, Any]) -> bytes:
        """Sign a fully populated transaction dict; return the raw signed bytes."""

    async def close(self) -> None:
        """Release network resources."""


def _tx_hash_of(result: Any) -> str:
    """Normalize an SDK transfer result (hash string or object with transaction_hash)."""
    tx_hash = result if isinstance(result, str) else getattr(result, "transaction_hash", None)
    if not tx_hash:
        raise RuntimeError("custody transfer did not return a transaction hash")
    tx_hash = str(tx_hash)
    return tx_hash if tx_hash.startswith("0x") else "0x" + tx_hash


class CdpCustodyService:
    """
    CustodyService backed by the CDP SDK (server-managed EVM accounts).

    The SDK client is created on first use per instance (not per process) and
    closed by close(). Missing credentials surface as CustodyUnavailable at
    call time.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._client: Any = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self._settings.has_custody_credentials:
            logger.warning("custody_credentials_missing")
            raise CustodyUnavailable("Custody client not initialized. Check CDP credentials.")
        async with self._lock:
            if self._client is None:
                from cdp import CdpClient

                try:
                    self._client = CdpClient(
                        api_key_id=self._settings.cdp_api_key_id,
                        api_key_secret=self._settings.cdp_api_key_secret,
                        wallet_secret=self._settings.cdp_wallet_secret,
                    )
                except Exception as e:
                    logger.error("custody_client_init_failed", error=str(e))
                    raise CustodyUnavailable(f"Failed to initialize custody client: {e}") from e
                logger.info("custody_client_initialized")
        return self._client

    async def _account(self, name: str) -> Any:
        client = await self._get_client()
        return await client.evm.get_or_create_account(name=name)

    async def get_or_create_account(self, name: str) -> str:
        account = await self._account(name)
        return str(account.address)

    async def transfer(self, name: str, network: str, to: str, token: str, amount: int) -> str:
        account = await self._account(name)
        result = await account.transfer(to=to, amount=amount, token=token, network=network)
        return _tx_hash_of(result)

    async def sign_transaction(self, name: str, transaction: dict[str, Any]) -> bytes:
        account = await self._account(name)
        signed = account.sign_transaction(transaction)
        if inspect.isawaitable(signed):
            signed = await signed
        return bytes(signed.raw_transaction)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
