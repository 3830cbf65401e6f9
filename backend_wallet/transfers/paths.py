"""
Transfer execution paths.

Each path turns a request into a PathOutcome instead of raising, so the
executor can walk an ordered list and report which path produced the hash.

- PrimaryCustodyPath: the custody service signs and broadcasts itself.
- LocalSigningPath: build the transaction against the network RPC, have the
  custody service sign it, broadcast the raw bytes and wait for the receipt.
"""

from __future__ import annotations

from typing import Any, Callable

from backend_wallet.core.http import redact
from backend_wallet.custody.client import CustodyService
from backend_wallet.custody.provisioner import Account
from backend_wallet.networks.assets import NativeAsset
from backend_wallet.networks.registry import NetworkDescriptor
from backend_wallet.transfers.calldata import erc20_transfer
from backend_wallet.transfers.chain import ChainClient
from backend_wallet.transfers.models import PATH_FALLBACK, PATH_PRIMARY, PathOutcome, TransferRequest
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

ChainClientFactory = Callable[[NetworkDescriptor], ChainClient]


class PrimaryCustodyPath:
    name = PATH_PRIMARY

    def __init__(self, custody: CustodyService) -> None:
        self._custody = custody

    async def execute(self, account: Account, request: TransferRequest) -> PathOutcome:
        token = request.asset.custody_token
        try:
            tx_hash = await self._custody.transfer(
                account.logical_name,
                request.network.id,
                request.recipient,
                token,
                request.amount,
            )
        except Exception as e:
            error = redact(str(e))
            logger.warning("transfer_path_failed", path=self.name, network=request.network.id, token=token, error=error)
            return PathOutcome(path=self.name, error=error)
        return PathOutcome(path=self.name, tx_hash=tx_hash)


class LocalSigningPath:
    name = PATH_FALLBACK

    def __init__(
        self,
        custody: CustodyService,
        chains: ChainClientFactory,
        receipt_timeout_sec: float = 120.0,
    ) -> None:
        self._custody = custody
        self._chains = chains
        self._receipt_timeout_sec = receipt_timeout_sec

    async def execute(self, account: Account, request: TransferRequest) -> PathOutcome:
        if isinstance(request.asset, NativeAsset):
            to, value, data = request.recipient, request.amount, b""
        else:
            to, value, data = request.asset.contract_address, 0, erc20_transfer(request.recipient, request.amount)
        return await self.send_call(account, request.network, to=to, value=value, data=data)

    async def send_call(
        self,
        account: Account,
        network: NetworkDescriptor,
        *,
        to: str,
        value: int,
        data: bytes,
    ) -> PathOutcome:
        """
        Build, sign, broadcast and wait for one transaction; never raises.

        Once the raw transaction is broadcast the outcome always carries its
        hash, even when the receipt wait fails or the receipt shows a revert.
        """
        try:
            chain = self._chains(network)
            tx_hash = await self._broadcast(chain, account, network, to=to, value=value, data=data)
        except Exception as e:
            error = redact(str(e))
            logger.warning("transfer_path_failed", path=self.name, network=network.id, to=to, error=error)
            return PathOutcome(path=self.name, error=error)

        try:
            receipt = await chain.wait_for_receipt(tx_hash, self._receipt_timeout_sec)
        except Exception as e:
            error = redact(str(e)) or type(e).__name__
            logger.warning("transaction_unconfirmed", path=self.name, network=network.id, tx_hash=tx_hash, error=error)
            return PathOutcome(path=self.name, tx_hash=tx_hash, error=error, unconfirmed=True)
        if receipt.get("status") == 0:
            logger.warning("transaction_reverted", path=self.name, network=network.id, tx_hash=tx_hash)
            return PathOutcome(path=self.name, tx_hash=tx_hash, error=f"transaction {tx_hash} reverted")
        logger.info(
            "transaction_confirmed",
            network=network.id,
            tx_hash=tx_hash,
            block_number=receipt.get("blockNumber"),
        )
        return PathOutcome(path=self.name, tx_hash=tx_hash)

    async def _broadcast(
        self,
        chain: ChainClient,
        account: Account,
        network: NetworkDescriptor,
        *,
        to: str,
        value: int,
        data: bytes,
    ) -> str:
        tx: dict[str, Any] = {
            "from": account.address,
            "to": to,
            "value": value,
            "chainId": network.chain_id,
        }
        if data:
            tx["data"] = "0x" + data.hex()
        tx["nonce"] = await chain.get_nonce(account.address)
        tx["gas"] = await chain.estimate_gas(tx)
        tx["gasPrice"] = await chain.gas_price()

        unsigned = {k: v for k, v in tx.items() if k != "from"}
        raw = await self._custody.sign_transaction(account.logical_name, unsigned)
        tx_hash = await chain.send_raw_transaction(raw)
        logger.info("transaction_broadcast", network=network.id, tx_hash=tx_hash, nonce=tx["nonce"])
        return tx_hash
