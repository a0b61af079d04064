from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import health, prices, swap
from .config import settings
from .core.errors import SessionNotFoundError, UnknownAssetError
from .core.swap.manager import SwapSessionManager
from .core.swap.session import SettlementHandler
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .services.price_cache import PriceCache
from .services.price_feed import PriceFeed


def create_app(
    price_cache: Optional[PriceCache] = None,
    *,
    settle: Optional[SettlementHandler] = None,
    prefetch: bool = True,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the API around one price cache; the cache lives as long as the app."""

    cache = price_cache or PriceCache()
    feed = PriceFeed(cache)
    manager = SwapSessionManager(feed, settle=settle)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging()
        if prefetch:
            feed.start_background_refresh()
        yield
        manager.close_all()
        await feed.aclose()

    app = FastAPI(
        title="Token Swap API",
        description="Cached market prices and simulated two-token swaps",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.price_feed = feed
    app.state.session_manager = manager

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request: Request, exc: SessionNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(UnknownAssetError)
    async def unknown_asset(request: Request, exc: UnknownAssetError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    app.include_router(health.router, tags=["Health"])
    app.include_router(prices.router, tags=["Prices"])
    app.include_router(swap.router, tags=["Swap"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "Token Swap API",
            "version": "0.1.0",
            "description": "Cached market prices and simulated two-token swaps",
            "docs": "/docs",
            "health": "/healthz",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tokenswap.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
