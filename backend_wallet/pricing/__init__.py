"""
Price resolution — ordered USD price oracles behind a TTL cache.
"""

from backend_wallet.pricing.oracles import PriceResult  # noqa: F401
from backend_wallet.pricing.resolver import PriceResolver  # noqa: F401

__all__ = ["PriceResolver", "PriceResult"]
