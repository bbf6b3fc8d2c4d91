"""Track enhancement endpoints.

Hey future me - POST /api/tracks/enhance runs the WHOLE batch inside the request.
With ~90 YouTube searches a day and 55 Discogs calls a minute, a big show can take
minutes. That's acceptable for the admin tooling this serves, but don't wire it
into anything user-facing without moving it to a background job first.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from trackenhancer.api.dependencies import get_track_enhancement_service
from trackenhancer.api.schemas import (
    EnhancedTrackResponse,
    EnhanceTracksRequest,
    EnhanceTracksResponse,
    EnhancementSummaryResponse,
    QuotaAvailabilityResponse,
    QuotaStatusResponse,
)
from trackenhancer.application.services import (
    EnhancementOptions,
    TrackEnhancementService,
)
from trackenhancer.domain.dtos import QuotaStatus
from trackenhancer.domain.value_objects.provider_types import Provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tracks", tags=["Tracks"])


@router.post(
    "/enhance",
    response_model=EnhanceTracksResponse,
    responses={429: {"description": "An enabled provider has no quota left"}},
)
async def enhance_tracks(
    body: EnhanceTracksRequest,
    service: TrackEnhancementService = Depends(get_track_enhancement_service),
) -> EnhanceTracksResponse | JSONResponse:
    """Enhance tracks with YouTube videos and Discogs artists.

    Refuses to start (429) when an enabled provider can't take any more work,
    otherwise always answers 200 with per-track statuses, even if every
    provider call failed.
    """
    opts = body.options
    availability = service.check_quotas()
    enabled = {Provider.YOUTUBE: opts.enable_youtube, Provider.DISCOGS: opts.enable_discogs}
    for provider, is_enabled in enabled.items():
        if is_enabled and not availability[provider].available:
            logger.warning(
                f"Refusing enhancement, {provider.value} unavailable: "
                f"{availability[provider].message}"
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "message": availability[provider].message,
                    "quota_status": {
                        p.value: QuotaAvailabilityResponse.from_dto(a).model_dump()
                        for p, a in availability.items()
                    },
                },
            )

    warnings: list[str] = []

    def on_quota_warning(provider: Provider, quota: QuotaStatus) -> None:
        warnings.append(
            f"{provider.value} quota at {quota.percent_used:.1f}% "
            f"({quota.used}/{quota.max} per {quota.window})"
        )

    def on_progress(completed: int, total: int, label: str, phase: str) -> None:
        logger.debug(f"Enhancement progress: {completed}/{total} - {phase} - {label}")

    queries = [track.to_query() for track in body.tracks]
    result = await service.enhance_batch(
        queries,
        EnhancementOptions(
            enable_youtube=opts.enable_youtube,
            enable_discogs=opts.enable_discogs,
            skip_existing=opts.skip_existing,
            on_progress=on_progress,
            on_quota_warning=on_quota_warning,
        ),
    )

    summary = result.summary
    return EnhanceTracksResponse(
        success=True,
        message=(
            f"Enhanced {summary.total} tracks: {summary.youtube_found} YouTube videos, "
            f"{summary.discogs_found} Discogs artists found"
        ),
        tracks=[EnhancedTrackResponse.from_dto(t) for t in result.tracks],
        summary=EnhancementSummaryResponse.from_dto(summary),
        quota_usage={
            provider.value: QuotaStatusResponse.from_dto(quota)
            for provider, quota in result.quota_usage.items()
        },
        warnings=warnings,
    )
