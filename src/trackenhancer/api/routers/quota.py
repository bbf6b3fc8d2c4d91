"""Provider quota endpoints (read-only, never touch the counters)."""

from fastapi import APIRouter, Depends, HTTPException, status

from trackenhancer.api.dependencies import get_track_enhancement_service
from trackenhancer.api.schemas import (
    QuotaAvailabilityResponse,
    QuotaOverviewResponse,
    QuotaStatusResponse,
)
from trackenhancer.application.services import TrackEnhancementService
from trackenhancer.domain.value_objects.provider_types import Provider

router = APIRouter(prefix="/quota", tags=["Quota"])


@router.get("", response_model=QuotaOverviewResponse)
async def get_quota_overview(
    service: TrackEnhancementService = Depends(get_track_enhancement_service),
) -> QuotaOverviewResponse:
    """Quota snapshot and availability for all providers."""
    availability = service.check_quotas()
    return QuotaOverviewResponse(
        quotas={
            provider.value: QuotaStatusResponse.from_dto(service.get_quota_status(provider))
            for provider in Provider
        },
        availability={
            provider.value: QuotaAvailabilityResponse.from_dto(a)
            for provider, a in availability.items()
        },
    )


@router.get("/{provider}", response_model=QuotaStatusResponse)
async def get_provider_quota(
    provider: str,
    service: TrackEnhancementService = Depends(get_track_enhancement_service),
) -> QuotaStatusResponse:
    """Quota snapshot for one provider (youtube or discogs)."""
    parsed = Provider.from_string(provider)
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown provider: {provider}",
        )
    return QuotaStatusResponse.from_dto(service.get_quota_status(parsed))
