"""API router initialization."""

# Main API router aggregator, mounted under /api in main.py. Every sub-router brings its
# own prefix, so endpoints end up as /api/tracks/enhance, /api/quota/youtube etc.

from fastapi import APIRouter

from trackenhancer.api.routers import discography, quota, tracks

api_router = APIRouter()

api_router.include_router(tracks.router)
api_router.include_router(quota.router)
api_router.include_router(discography.router)

__all__ = ["api_router", "discography", "quota", "tracks"]
