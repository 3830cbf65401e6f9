"""
Structured logging for the wallet engine.

JSON logs with timestamp, event_type, network and address context.
Use get_logger() in all modules for aggregation-friendly output.
"""

from backend_wallet.wallet_logging.logger import bind_request, get_logger

__all__ = ["bind_request", "get_logger"]
