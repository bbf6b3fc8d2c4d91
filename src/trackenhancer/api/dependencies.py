"""Dependency injection for API endpoints."""

import logging
from typing import cast

from fastapi import Depends, Request

from trackenhancer.application.services import (
    DiscographyService,
    TrackEnhancementService,
)
from trackenhancer.config import Settings, get_settings
from trackenhancer.infrastructure.integrations import DiscogsClient, YouTubeClient

logger = logging.getLogger(__name__)


# Hey future me, the provider clients live on app.state! They're created ONCE in the app
# lifespan (see main.py) so their httpx connection pools are reused across requests. The
# rate limiters are process singletons anyway, a fresh client per request would only
# throw away connections.
def get_youtube_client(request: Request) -> YouTubeClient:
    """Get the shared YouTube client from app state."""
    return cast(YouTubeClient, request.app.state.youtube_client)


def get_discogs_client(request: Request) -> DiscogsClient:
    """Get the shared Discogs client from app state."""
    return cast(DiscogsClient, request.app.state.discogs_client)


def get_track_enhancement_service(
    youtube_client: YouTubeClient = Depends(get_youtube_client),
    discogs_client: DiscogsClient = Depends(get_discogs_client),
    settings: Settings = Depends(get_settings),
) -> TrackEnhancementService:
    """Get track enhancement service instance (cheap, created per request)."""
    return TrackEnhancementService(
        youtube_client,
        discogs_client,
        quota_warning_percent=settings.enhancement.quota_warning_percent,
    )


def get_discography_service(
    discogs_client: DiscogsClient = Depends(get_discogs_client),
    settings: Settings = Depends(get_settings),
) -> DiscographyService:
    """Get discography service instance."""
    return DiscographyService(
        discogs_client, max_pages=settings.enhancement.discography_max_pages
    )
