"""FastAPI application factory.

Run with:
    uvicorn trackenhancer.main:create_app --factory
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from trackenhancer import __version__
from trackenhancer.api import api_router
from trackenhancer.api.exception_handlers import register_exception_handlers
from trackenhancer.config import Settings, get_settings
from trackenhancer.infrastructure.integrations import DiscogsClient, YouTubeClient
from trackenhancer.infrastructure.observability import (
    configure_logging,
    set_correlation_id,
)
from trackenhancer.infrastructure.rate_limiter import close_limiters

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"


# Hey future me, the clients are created HERE and torn down here. Shutdown also closes the
# singleton rate limiters: their drain tasks belong to this event loop, and anything still
# queued would otherwise hang forever.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared provider clients on startup, close them on shutdown."""
    settings: Settings = app.state.settings

    app.state.youtube_client = YouTubeClient(settings.youtube)
    app.state.discogs_client = DiscogsClient(settings.discogs)

    if not app.state.youtube_client.is_configured:
        logger.warning("YOUTUBE_API_KEY not set, YouTube enhancement is disabled")
    if not app.state.discogs_client.is_configured:
        logger.warning("DISCOGS_API_TOKEN not set, Discogs enhancement is disabled")

    logger.info(f"{settings.app_name} {__version__} started")
    try:
        yield
    finally:
        await app.state.youtube_client.close()
        await app.state.discogs_client.close()
        await close_limiters()
        logger.info(f"{settings.app_name} stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use, defaults to get_settings()

    Returns:
        Configured FastAPI app with /api routes
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.observability.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )

    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    @app.middleware("http")
    async def correlation_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app
