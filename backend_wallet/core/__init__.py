"""
Core utilities — exceptions, amount arithmetic and the shared HTTP client.

Cross-cutting pieces used by the registry, pricing, indexer, aggregation,
transfer and API layers.
"""
