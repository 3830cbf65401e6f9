"""
FastAPI server — wallet engine over HTTP.

Builds the WalletEngine in the lifespan (unless one was injected), mounts the
/wallet router, the request-id middleware, the envelope-shaped validation
handler and a /health liveness probe.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend_wallet import __version__
from backend_wallet.api_server.middleware import request_context_middleware
from backend_wallet.api_server.responses import send_error
from backend_wallet.api_server.routes import router as wallet_router
from backend_wallet.config import get_settings
from backend_wallet.engine import WalletEngine
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the engine on startup (when not injected) and release its clients on shutdown."""
    owned = getattr(app.state, "engine", None) is None
    if owned:
        app.state.engine = WalletEngine.from_settings(get_settings())
    logger.info("api_started", version=__version__)
    try:
        yield
    finally:
        if owned:
            await app.state.engine.aclose()
            app.state.engine = None
        logger.info("api_stopped")


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return send_error(400, "INVALID_REQUEST", "Malformed request body", errors)


def create_app(engine: WalletEngine | None = None) -> FastAPI:
    app = FastAPI(
        title="Backend Wallet API",
        description="Multi-network custodial wallet: accounts, balances, NFTs, history and transfers.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.middleware("http")(request_context_middleware)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(wallet_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness probe: API is up."""
        return {"status": "ok"}

    return app


app = create_app()
