"""Pydantic request/response models for the HTTP API."""

from trackenhancer.api.schemas.enhancement import (
    DiscogsArtistResponse,
    DiscographyProfileRequest,
    DiscographyProfileResponse,
    EnhancedTrackResponse,
    EnhanceTracksRequest,
    EnhanceTracksResponse,
    EnhancementOptionsInput,
    EnhancementSummaryResponse,
    QuotaAvailabilityResponse,
    QuotaOverviewResponse,
    QuotaStatusResponse,
    ReleaseRecordResponse,
    TrackInput,
    YouTubeMatchResponse,
)

__all__ = [
    "DiscogsArtistResponse",
    "DiscographyProfileRequest",
    "DiscographyProfileResponse",
    "EnhanceTracksRequest",
    "EnhanceTracksResponse",
    "EnhancedTrackResponse",
    "EnhancementOptionsInput",
    "EnhancementSummaryResponse",
    "QuotaAvailabilityResponse",
    "QuotaOverviewResponse",
    "QuotaStatusResponse",
    "ReleaseRecordResponse",
    "TrackInput",
    "YouTubeMatchResponse",
]
