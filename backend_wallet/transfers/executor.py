"""
Transfer executor — ordered execution paths, first success wins.

Fungible transfers try the custody service first and fall back to local
signing. NFT transfers only have the local path and block until mined.
Nothing here retries a broadcast, and once a path has broadcast no later
path runs: its hash goes back to the caller even if it never confirmed.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from backend_wallet.core.exceptions import TransferFailed
from backend_wallet.custody.provisioner import Account, AccountProvisioner
from backend_wallet.transfers.calldata import erc721_safe_transfer_from
from backend_wallet.transfers.models import NFTTransferRequest, PathOutcome, TransferRequest, TransferResult
from backend_wallet.transfers.paths import LocalSigningPath
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

SEND_NFT_FAILED = "SEND_NFT_FAILED"


class TransferPath(Protocol):
    name: str

    async def execute(self, account: Account, request: TransferRequest) -> PathOutcome: ...


class TransferExecutor:
    def __init__(
        self,
        provisioner: AccountProvisioner,
        paths: Sequence[TransferPath],
        nft_path: LocalSigningPath,
    ) -> None:
        if not paths:
            raise ValueError("at least one transfer path is required")
        self._provisioner = provisioner
        self._paths = list(paths)
        self._nft_path = nft_path

    async def transfer(self, request: TransferRequest) -> TransferResult:
        account = await self._provisioner.provision(request.logical_name)
        logger.info(
            "transfer_started",
            account_name=account.logical_name,
            network=request.network.id,
            to=request.recipient,
            token=request.token or request.asset.custody_token,
            amount=str(request.amount),
        )
        outcomes: list[PathOutcome] = []
        for path in self._paths:
            outcome = await path.execute(account, request)
            outcomes.append(outcome)
            if outcome.ok:
                logger.info(
                    "transfer_succeeded",
                    path=outcome.path,
                    network=request.network.id,
                    tx_hash=outcome.tx_hash,
                )
                return TransferResult(
                    transaction_hash=outcome.tx_hash,
                    from_address=account.address,
                    execution_path=outcome.path,
                    explorer_url=request.network.explorer_tx_url(outcome.tx_hash),
                    attempted_paths=outcomes,
                )
            if outcome.broadcast:
                break
        attempts = [o.to_dict() for o in outcomes]
        broadcast_hash = outcomes[-1].tx_hash
        logger.error("transfer_failed", network=request.network.id, tx_hash=broadcast_hash, attempts=attempts)
        raise TransferFailed(_summary("Failed to send tokens", outcomes), attempts, tx_hash=broadcast_hash)

    async def transfer_nft(self, request: NFTTransferRequest) -> TransferResult:
        account = await self._provisioner.provision(request.logical_name)
        asset = request.asset
        logger.info(
            "nft_transfer_started",
            account_name=account.logical_name,
            network=request.network.id,
            contract=asset.contract_address,
            token_id=str(asset.token_id),
            to=request.recipient,
        )
        outcome = await self._nft_path.send_call(
            account,
            request.network,
            to=asset.contract_address,
            value=0,
            data=erc721_safe_transfer_from(account.address, request.recipient, asset.token_id),
        )
        if not outcome.ok:
            logger.error("nft_transfer_failed", network=request.network.id, tx_hash=outcome.tx_hash, error=outcome.error)
            raise TransferFailed(
                _summary("Failed to send NFT", [outcome]),
                [outcome.to_dict()],
                code=SEND_NFT_FAILED,
                tx_hash=outcome.tx_hash,
            )
        logger.info("nft_transfer_succeeded", network=request.network.id, tx_hash=outcome.tx_hash)
        return TransferResult(
            transaction_hash=outcome.tx_hash,
            from_address=account.address,
            execution_path=outcome.path,
            explorer_url=request.network.explorer_tx_url(outcome.tx_hash),
            attempted_paths=[outcome],
        )


def _summary(prefix: str, outcomes: list[PathOutcome]) -> str:
    reasons = "; ".join(f"{o.path}: {o.error}" for o in outcomes)
    return f"{prefix} ({reasons})" if reasons else prefix
