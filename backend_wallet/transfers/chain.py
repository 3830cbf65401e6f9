"""
Network RPC access for the local-signing path (web3 AsyncWeb3).

ChainClient is the handful of calls the path needs; Web3ChainClients hands out
one per network, built on the indexer RPC URL for that network.
"""

from __future__ import annotations

from typing import Any, Protocol

from web3 import AsyncHTTPProvider, AsyncWeb3

from backend_wallet.networks.registry import NetworkDescriptor, require_api_key


class ChainClient(Protocol):
    async def get_nonce(self, address: str) -> int: ...

    async def estimate_gas(self, transaction: dict[str, Any]) -> int: ...

    async def gas_price(self) -> int: ...

    async def send_raw_transaction(self, raw: bytes) -> str: ...

    async def wait_for_receipt(self, tx_hash: str, timeout_sec: float) -> dict[str, Any]: ...


class Web3ChainClient:
    def __init__(self, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def get_nonce(self, address: str) -> int:
        return await self._w3.eth.get_transaction_count(address, "pending")

    async def estimate_gas(self, transaction: dict[str, Any]) -> int:
        return await self._w3.eth.estimate_gas(transaction)

    async def gas_price(self) -> int:
        return await self._w3.eth.gas_price

    async def send_raw_transaction(self, raw: bytes) -> str:
        tx_hash = await self._w3.eth.send_raw_transaction(raw)
        return AsyncWeb3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str, timeout_sec: float) -> dict[str, Any]:
        receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout_sec)
        return dict(receipt)

    async def aclose(self) -> None:
        await self._w3.provider.disconnect()


class Web3ChainClients:
    """Factory of ChainClients keyed by network id; AsyncWeb3 instances are reused."""

    def __init__(self, api_key: str, timeout_sec: float = 15.0) -> None:
        self._api_key = api_key
        self._timeout_sec = timeout_sec
        self._clients: dict[str, Web3ChainClient] = {}

    def __call__(self, network: NetworkDescriptor) -> ChainClient:
        client = self._clients.get(network.id)
        if client is None:
            url = network.rpc_url(require_api_key(self._api_key, "Alchemy"))
            # No provider-level retries: a retried eth_sendRawTransaction could broadcast twice
            provider = AsyncHTTPProvider(
                url,
                request_kwargs={"timeout": self._timeout_sec},
                exception_retry_configuration=None,
            )
            client = Web3ChainClient(AsyncWeb3(provider))
            self._clients[network.id] = client
        return client

    async def aclose(self) -> None:
        clients, self._clients = list(self._clients.values()), {}
        for client in clients:
            await client.aclose()
