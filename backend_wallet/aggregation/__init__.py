"""Read-path aggregators: balances, NFTs, history."""

from backend_wallet.aggregation.balances import BalanceAggregator
from backend_wallet.aggregation.history import HistoryAggregator
from backend_wallet.aggregation.nfts import NFTAggregator

__all__ = ["BalanceAggregator", "HistoryAggregator", "NFTAggregator"]
