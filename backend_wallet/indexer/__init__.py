"""
Blockchain indexer client — token balances, NFT ownership and transfer logs.
"""

from backend_wallet.indexer.alchemy import AlchemyIndexer  # noqa: F401

__all__ = ["AlchemyIndexer"]
