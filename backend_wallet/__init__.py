"""
Backend Wallet — multi-chain custodial wallet engine.

Provisions custody-managed accounts, aggregates balances, NFTs and transfer
history across EVM networks, resolves USD prices through fallback oracles,
and executes transfers with a local-signing fallback. Modular layout with
clear separation between registry, pricing, custody, indexer, aggregation,
transfers and API server.
"""

__version__ = "0.1.0"
