"""Discography endpoints for artist profile generation."""

from fastapi import APIRouter, Depends

from trackenhancer.api.dependencies import get_discography_service
from trackenhancer.api.schemas import (
    DiscographyProfileRequest,
    DiscographyProfileResponse,
)
from trackenhancer.application.services import DiscographyService

router = APIRouter(prefix="/discography", tags=["Discography"])


# Not finding the artist is a normal answer here (success=false + error), not a 404.
# Profile generation treats "no discography" as "write the profile without one".
@router.post("/profile", response_model=DiscographyProfileResponse)
async def get_discography_profile(
    body: DiscographyProfileRequest,
    service: DiscographyService = Depends(get_discography_service),
) -> DiscographyProfileResponse:
    """Resolve an artist on Discogs and return their filtered discography."""
    result = await service.get_artist_discography_for_profile(
        body.artist_name,
        max_releases=body.max_releases,
        include_details=body.include_details,
        discogs_url=body.discogs_url,
        discogs_id=body.discogs_id,
    )
    return DiscographyProfileResponse.from_dto(result)
