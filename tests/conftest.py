"""
Pytest fixtures for wallet engine tests.

Upstreams are faked at the HTTP layer (httpx.MockTransport routing Alchemy
JSON-RPC / NFT REST, CoinGecko and DexScreener), custody and chain access
through in-memory fakes injected into WalletEngine.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

import httpx
import pytest
import pytest_asyncio

from backend_wallet.config.settings import Settings
from backend_wallet.core.http import JsonHttpClient

ALCHEMY_KEY = "test-alchemy-key"

HOST_NETWORKS = {
    "base-mainnet": "base",
    "eth-mainnet": "ethereum",
    "polygon-mainnet": "polygon",
    "base-sepolia": "base-sepolia",
    "eth-sepolia": "ethereum-sepolia",
}

USDC_BASE = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
NFT_CONTRACT = "0x1111111111111111111111111111111111111111"
DEAD = "0x000000000000000000000000000000000000dEaD"


def address_for(name: str) -> str:
    """Deterministic fake custody address for a logical name."""
    return "0x" + hashlib.sha256(name.encode()).hexdigest()[:40]


def tx_hash_for(seed: str) -> str:
    return "0x" + hashlib.sha256(seed.encode()).hexdigest()


class FakeUpstream:
    """
    Routes indexer and oracle requests to in-memory tables.

    Per network: native balance, ERC-20 balances, NFT contracts, owned NFTs and
    transfers. Networks in `failing` answer HTTP 503 to everything.
    """

    def __init__(self) -> None:
        self.native: dict[str, int] = {}
        self.tokens: dict[str, list[tuple[str, int]]] = {}
        self.metadata: dict[str, dict[str, Any]] = {}
        self.nft_contracts: set[str] = set()
        self.probe_errors: set[str] = set()
        self.owned_nfts: dict[str, list[dict[str, Any]]] = {}
        self.transfers: dict[str, dict[str, list[dict[str, Any]]]] = {}
        self.native_prices: dict[str, float] = {}
        self.coingecko: dict[str, dict[str, Any]] = {}
        self.dexscreener: dict[str, list[dict[str, Any]]] = {}
        self.failing: set[str] = set()
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host.endswith("alchemy.com"):
            network = HOST_NETWORKS[host.split(".")[0]]
            if network in self.failing:
                return httpx.Response(503, json={"error": "unavailable"})
            if "/nft/v3/" in request.url.path:
                return self._nft(network, request)
            return self._rpc(network, json.loads(request.content))
        if "coingecko" in host:
            return self._coingecko(request)
        if "dexscreener" in host:
            contract = request.url.path.rsplit("/", 1)[-1].lower()
            return httpx.Response(200, json={"pairs": self.dexscreener.get(contract)})
        return httpx.Response(404, json={})

    def _rpc(self, network: str, body: dict[str, Any]) -> httpx.Response:
        method, params = body["method"], body["params"]
        if method == "eth_getBalance":
            result: Any = hex(self.native.get(network, 0))
        elif method == "alchemy_getTokenBalances":
            result = {
                "address": params[0],
                "tokenBalances": [
                    {"contractAddress": c, "tokenBalance": hex(raw)} for c, raw in self.tokens.get(network, [])
                ],
            }
        elif method == "alchemy_getTokenMetadata":
            result = self.metadata.get(params[0].lower(), {"decimals": None, "symbol": None, "name": None})
        elif method == "alchemy_getAssetTransfers":
            options = params[0]
            direction = "fromAddress" if "fromAddress" in options else "toAddress"
            result = {"transfers": self.transfers.get(network, {}).get(direction, [])}
        else:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601}})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def _nft(self, network: str, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/getNFTsForContract"):
            contract = request.url.params["contractAddress"].lower()
            if contract in self.probe_errors:
                return httpx.Response(500, json={"error": "probe exploded"})
            if contract in self.nft_contracts:
                return httpx.Response(200, json={"nfts": [{"tokenId": "1"}]})
            return httpx.Response(400, json={"error": "not an NFT contract"})
        return httpx.Response(200, json={"ownedNfts": self.owned_nfts.get(network, [])})

    def _coingecko(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/simple/price"):
            price_id = request.url.params["ids"]
            if price_id not in self.native_prices:
                return httpx.Response(200, json={})
            return httpx.Response(200, json={price_id: {"usd": self.native_prices[price_id]}})
        contract = path.rsplit("/", 1)[-1].lower()
        entry = self.coingecko.get(contract)
        if entry is None:
            return httpx.Response(404, json={"error": "coin not found"})
        return httpx.Response(200, json=entry)


class FakeCustody:
    """In-memory custody service: stable addresses, scripted transfer failures."""

    def __init__(self) -> None:
        self.accounts: dict[str, str] = {}
        self.create_calls = 0
        self.fail_transfers: set[tuple[str, str]] = set()
        self.fail_get_or_create = 0
        self.transfers: list[tuple[str, str, str, str, int]] = []
        self.signed: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def get_or_create_account(self, name: str) -> str:
        if self.fail_get_or_create:
            self.fail_get_or_create -= 1
            raise RuntimeError("custody timeout")
        if name not in self.accounts:
            self.create_calls += 1
            self.accounts[name] = address_for(name)
        return self.accounts[name]

    async def transfer(self, name: str, network: str, to: str, token: str, amount: int) -> str:
        if (network, token) in self.fail_transfers:
            raise RuntimeError(f"token {token} not supported on {network}")
        self.transfers.append((name, network, to, token, amount))
        return tx_hash_for(f"primary:{name}:{network}:{to}:{token}:{amount}")

    async def sign_transaction(self, name: str, transaction: dict[str, Any]) -> bytes:
        self.signed.append((name, dict(transaction)))
        return json.dumps(transaction, sort_keys=True).encode()

    async def close(self) -> None:
        self.closed = True


class FakeChain:
    """ChainClient fake: records broadcasts, returns a scripted receipt status or error."""

    def __init__(self, receipt_status: int = 1) -> None:
        self.receipt_status = receipt_status
        self.sent: list[bytes] = []
        self.estimated: list[dict[str, Any]] = []
        self.fail_send = False
        self.send_error: Exception | None = None
        self.receipt_error: Exception | None = None

    async def get_nonce(self, address: str) -> int:
        return 7

    async def estimate_gas(self, transaction: dict[str, Any]) -> int:
        self.estimated.append(dict(transaction))
        return 21000 if "data" not in transaction else 65000

    async def gas_price(self) -> int:
        return 1_000_000_000

    async def send_raw_transaction(self, raw: bytes) -> str:
        if self.fail_send:
            raise self.send_error or RuntimeError("nonce too low")
        self.sent.append(raw)
        return tx_hash_for(raw.decode())

    async def wait_for_receipt(self, tx_hash: str, timeout_sec: float) -> dict[str, Any]:
        if self.receipt_error is not None:
            raise self.receipt_error
        return {"transactionHash": tx_hash, "status": self.receipt_status, "blockNumber": 123}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        cdp_api_key_id="id",
        cdp_api_key_secret="secret",
        cdp_wallet_secret="wallet-secret",
        alchemy_api_key=ALCHEMY_KEY,
        http_max_retries=1,
        retry_min_delay_sec=0.0,
        retry_max_delay_sec=0.0,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def custody() -> FakeCustody:
    return FakeCustody()


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest_asyncio.fixture
async def http(upstream):
    client = JsonHttpClient(
        max_retries=1,
        min_retry_delay_sec=0.0,
        max_retry_delay_sec=0.0,
        transport=httpx.MockTransport(upstream),
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def engine(settings, upstream, custody, chain):
    from backend_wallet.engine import WalletEngine

    wallet_engine = WalletEngine.from_settings(
        settings,
        custody=custody,
        transport=httpx.MockTransport(upstream),
        chains=lambda network: chain,
    )
    yield wallet_engine
    await wallet_engine.http.aclose()


@pytest.fixture
def client(settings, upstream, custody, chain):
    """FastAPI TestClient over an engine wired to the fakes."""
    from fastapi.testclient import TestClient

    from backend_wallet.api_server.server import create_app
    from backend_wallet.engine import WalletEngine

    wallet_engine = WalletEngine.from_settings(
        settings,
        custody=custody,
        transport=httpx.MockTransport(upstream),
        chains=lambda network: chain,
    )
    with TestClient(create_app(wallet_engine)) as test_client:
        yield test_client
