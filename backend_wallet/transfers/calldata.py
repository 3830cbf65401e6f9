"""ABI call data for token transfers built on the local-signing path."""

from __future__ import annotations

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

ERC20_TRANSFER = "transfer(address,uint256)"
ERC721_SAFE_TRANSFER_FROM = "safeTransferFrom(address,address,uint256)"


def erc20_transfer(recipient: str, amount: int) -> bytes:
    selector = function_signature_to_4byte_selector(ERC20_TRANSFER)
    return selector + encode(["address", "uint256"], [to_checksum_address(recipient), amount])


def erc721_safe_transfer_from(sender: str, recipient: str, token_id: int) -> bytes:
    selector = function_signature_to_4byte_selector(ERC721_SAFE_TRANSFER_FROM)
    return selector + encode(
        ["address", "address", "uint256"],
        [to_checksum_address(sender), to_checksum_address(recipient), token_id],
    )
