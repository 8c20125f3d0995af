"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from rugbyhub.api.dispatcher import RequestDispatcher
from rugbyhub.api.routes import events, health
from rugbyhub.config import VERSION, ProxyConfig
from rugbyhub.providers.tsdb.client import TSDBClient
from rugbyhub.services.response_cache import CacheGateway, CacheStore
from rugbyhub.utilities.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    config: ProxyConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    cache_store: CacheStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Proxy configuration (loaded from the environment at startup if None)
        transport: Optional httpx transport for the upstream client
        cache_store: Optional response cache store (in-memory by default)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        app_config = config or ProxyConfig.from_env()

        # Startup
        setup_logging(app_config.log_level, app_config.log_dir)
        logger.info(f"Starting Rugby Hub {VERSION} ({app_config.mode})...")

        client = TSDBClient(
            api_key=app_config.api_key,
            base_url=app_config.base_url,
            timeout=app_config.request_timeout_seconds,
            transport=transport,
            max_connections=app_config.max_variety_days,
        )
        await client.open()

        app.state.config = app_config
        app.state.dispatcher = RequestDispatcher(
            app_config, client, CacheGateway(cache_store)
        )
        logger.info("Rugby Hub ready")

        yield

        # Shutdown
        logger.info("Shutting down Rugby Hub...")
        await client.close()
        logger.info("Rugby Hub stopped")

    app = FastAPI(
        title="Rugby Hub API",
        description="Caching proxy for TheSportsDB upcoming events",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(events.router, tags=["Events"])

    return app


app = create_app()
