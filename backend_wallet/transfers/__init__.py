"""Write path: dual-path fungible transfers and local-signing NFT transfers."""

from backend_wallet.transfers.executor import TransferExecutor
from backend_wallet.transfers.models import (
    NFTTransferRequest,
    PathOutcome,
    TransferRequest,
    TransferResult,
    build_nft_transfer_request,
    build_transfer_request,
)
from backend_wallet.transfers.paths import LocalSigningPath, PrimaryCustodyPath

__all__ = [
    "LocalSigningPath",
    "NFTTransferRequest",
    "PathOutcome",
    "PrimaryCustodyPath",
    "TransferExecutor",
    "TransferRequest",
    "TransferResult",
    "build_nft_transfer_request",
    "build_transfer_request",
]
