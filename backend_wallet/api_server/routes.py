"""
Wallet routes under /wallet.

POST /wallet                  provision (or look up) the account for a name
GET  /wallet/tokens/{name}    balances across networks + total USD value
GET  /wallet/nfts/{name}      NFT holdings across networks
GET  /wallet/history/{name}   merged transfer history, newest first
POST /wallet/send             native / ERC-20 transfer (custody first, local fallback)
POST /wallet/send-nft         ERC-721 transfer (local signing, waits until mined)

Routes only validate, delegate to the WalletEngine on app.state and shape the
envelope; no business logic lives here.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictInt, StrictStr

from backend_wallet.api_server.responses import error_from_exception, send_success
from backend_wallet.engine import WalletEngine
from backend_wallet.transfers import build_nft_transfer_request, build_transfer_request
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/wallet", tags=["wallet"])


class CreateWalletRequest(BaseModel):
    name: str | None = Field(None, description="Logical account name (one per end user)")


class SendRequest(BaseModel):
    name: str | None = None
    network: str | None = None
    to: str | None = None
    token: str | None = Field(None, description="'eth', a known alias such as 'usdc', or a 0x contract")
    amount: StrictStr | StrictInt | None = Field(None, description="Smallest-unit amount as a base-10 string")


class SendNFTRequest(BaseModel):
    name: str | None = None
    network: str | None = None
    to: str | None = None
    contractAddress: str | None = None
    tokenId: StrictStr | StrictInt | None = None


def get_engine(request: Request) -> WalletEngine:
    return request.app.state.engine


@router.post("")
async def create_wallet(body: CreateWalletRequest, request: Request) -> JSONResponse:
    engine = get_engine(request)
    try:
        account = await engine.provisioner.provision(body.name)
    except Exception as e:
        return error_from_exception(e, code="CREATE_WALLET_FAILED", message="Failed to create wallet")
    return send_success({"address": account.address, "accountName": account.logical_name})


@router.get("/tokens/{name}")
async def get_tokens(name: str, request: Request) -> JSONResponse:
    engine = get_engine(request)
    try:
        account = await engine.provisioner.provision(name)
        result = await engine.balances.get_balances(account.address)
    except Exception as e:
        return error_from_exception(e, code="FETCH_TOKENS_FAILED", message="Failed to fetch token balances")
    return send_success(
        {
            "tokens": [t.to_dict() for t in result.tokens],
            "totalUsdValue": result.total_usd_value,
            "address": account.address,
            "failedNetworks": result.failed_networks,
        }
    )


@router.get("/nfts/{name}")
async def get_nfts(name: str, request: Request) -> JSONResponse:
    engine = get_engine(request)
    try:
        account = await engine.provisioner.provision(name)
        result = await engine.nfts.get_nfts(account.address)
    except Exception as e:
        return error_from_exception(e, code="FETCH_NFTS_FAILED", message="Failed to fetch NFTs")
    return send_success(
        {
            "nfts": [n.to_dict() for n in result.nfts],
            "address": account.address,
            "failedNetworks": result.failed_networks,
        }
    )


@router.get("/history/{name}")
async def get_history(name: str, request: Request) -> JSONResponse:
    engine = get_engine(request)
    try:
        account = await engine.provisioner.provision(name)
        result = await engine.history.get_history(account.address)
    except Exception as e:
        return error_from_exception(e, code="FETCH_HISTORY_FAILED", message="Failed to fetch transaction history")
    return send_success(
        {
            "transactions": [t.to_dict() for t in result.transactions],
            "address": account.address,
            "failedNetworks": result.failed_networks,
        }
    )


@router.post("/send")
async def send(body: SendRequest, request: Request) -> JSONResponse:
    engine = get_engine(request)
    try:
        transfer = build_transfer_request(
            engine.registry,
            name=body.name,
            network=body.network,
            to=body.to,
            token=body.token,
            amount=body.amount,
        )
        result = await engine.transfers.transfer(transfer)
    except Exception as e:
        return error_from_exception(e, code="SEND_FAILED", message="Failed to send tokens")
    return send_success(
        {
            "transactionHash": result.transaction_hash,
            "from": result.from_address,
            "to": transfer.recipient,
            "amount": str(transfer.amount),
            "token": transfer.token,
            "network": transfer.network.id,
            "method": result.execution_path,
            "explorerUrl": result.explorer_url,
            "attemptedPaths": [o.to_dict() for o in result.attempted_paths],
        }
    )


@router.post("/send-nft")
async def send_nft(body: SendNFTRequest, request: Request) -> JSONResponse:
    engine = get_engine(request)
    try:
        transfer = build_nft_transfer_request(
            engine.registry,
            name=body.name,
            network=body.network,
            to=body.to,
            contract_address=body.contractAddress,
            token_id=body.tokenId,
        )
        result = await engine.transfers.transfer_nft(transfer)
    except Exception as e:
        return error_from_exception(e, code="SEND_NFT_FAILED", message="Failed to send NFT")
    return send_success(
        {
            "transactionHash": result.transaction_hash,
            "from": result.from_address,
            "to": transfer.recipient,
            "contractAddress": transfer.asset.contract_address,
            "tokenId": str(transfer.asset.token_id),
            "network": transfer.network.id,
            "explorerUrl": result.explorer_url,
        }
    )
