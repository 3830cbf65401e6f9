"""
Main entrypoint: wallet engine FastAPI server.

Env: CDP_API_KEY_ID, CDP_API_KEY_SECRET, CDP_WALLET_SECRET, ALCHEMY_API_KEY,
COINGECKO_API_KEY (optional), API_HOST, API_PORT, LOG_LEVEL, LOG_FORMAT.
Missing credentials do not stop startup; the affected routes answer 503.

Equivalent: uvicorn backend_wallet.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_wallet.wallet_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    from backend_wallet.config import get_settings

    settings = get_settings()
    if not settings.has_custody_credentials:
        logger.warning("main_custody_credentials_missing", message="CDP credentials not set; wallet routes will answer 503")
    if not settings.has_indexer_credentials:
        logger.warning("main_indexer_key_missing", message="ALCHEMY_API_KEY not set; read routes will answer 503")

    import uvicorn

    from backend_wallet.api_server.app import app

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
