"""Transfer requests, per-path outcomes and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend_wallet.custody.provisioner import validate_account_name
from backend_wallet.networks.assets import (
    FungibleAsset,
    NativeAsset,
    NonFungibleAsset,
    parse_nft,
    parse_token,
    require_address,
    require_uint,
)
from backend_wallet.networks.registry import NetworkDescriptor, NetworkRegistry

PATH_PRIMARY = "primary"
PATH_FALLBACK = "fallback"

STATUS_OK = "ok"
STATUS_FAILED = "failed"
STATUS_UNCONFIRMED = "unconfirmed"


@dataclass(frozen=True)
class TransferRequest:
    logical_name: str
    network: NetworkDescriptor
    recipient: str
    asset: NativeAsset | FungibleAsset
    amount: int
    token: str = ""


@dataclass(frozen=True)
class NFTTransferRequest:
    logical_name: str
    network: NetworkDescriptor
    recipient: str
    asset: NonFungibleAsset


@dataclass(frozen=True)
class PathOutcome:
    """
    What one execution path did.

    ok: a confirmed hash. A hash with an error means the transaction reached
    the network but did not confirm (unconfirmed) or reverted (failed); the
    hash is reported either way so the caller can look it up before retrying.
    """

    path: str
    tx_hash: str | None = None
    error: str | None = None
    unconfirmed: bool = False

    @property
    def ok(self) -> bool:
        return self.tx_hash is not None and self.error is None

    @property
    def broadcast(self) -> bool:
        return self.tx_hash is not None

    @property
    def status(self) -> str:
        if self.ok:
            return STATUS_OK
        return STATUS_UNCONFIRMED if self.unconfirmed else STATUS_FAILED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "status": self.status, "error": self.error}
        if self.tx_hash is not None:
            data["txHash"] = self.tx_hash
        return data


@dataclass(frozen=True)
class TransferResult:
    transaction_hash: str
    from_address: str
    execution_path: str
    explorer_url: str
    attempted_paths: list[PathOutcome] = field(default_factory=list)


def build_transfer_request(
    registry: NetworkRegistry,
    *,
    name: Any,
    network: Any,
    to: Any,
    token: Any,
    amount: Any,
) -> TransferRequest:
    """Validate wire fields into a TransferRequest; ValidationError on the first bad field."""
    logical_name = validate_account_name(name)
    descriptor = registry.get(str(network or ""))
    recipient = require_address(str(to or ""), "to")
    asset = parse_token(str(token or ""), descriptor)
    raw_amount = require_uint(amount if amount is not None else "", "amount", positive=True)
    return TransferRequest(
        logical_name=logical_name,
        network=descriptor,
        recipient=recipient,
        asset=asset,
        amount=raw_amount,
        token=str(token).strip(),
    )


def build_nft_transfer_request(
    registry: NetworkRegistry,
    *,
    name: Any,
    network: Any,
    to: Any,
    contract_address: Any,
    token_id: Any,
) -> NFTTransferRequest:
    logical_name = validate_account_name(name)
    descriptor = registry.get(str(network or ""))
    recipient = require_address(str(to or ""), "to")
    asset = parse_nft(str(contract_address or ""), token_id if token_id is not None else "")
    return NFTTransferRequest(
        logical_name=logical_name,
        network=descriptor,
        recipient=recipient,
        asset=asset,
    )
