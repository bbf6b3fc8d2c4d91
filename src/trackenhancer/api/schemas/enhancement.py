"""API schemas for track enhancement, quota and discography endpoints."""

from pydantic import BaseModel, Field

from trackenhancer.domain.dtos import (
    DiscogsArtistMatch,
    DiscographyResult,
    EnhancedTrack,
    EnhancementSummary,
    QuotaAvailability,
    QuotaStatus,
    ReleaseRecord,
    TrackQuery,
    YouTubeMatch,
)


class TrackInput(BaseModel):
    """One track entry to enhance."""

    id: str | None = Field(default=None, description="Caller's own track ID, echoed back")
    artist: str = Field(..., min_length=1, description="Artist name")
    track_name: str = Field(default="", description="Track title")
    youtube_url: str | None = Field(default=None, description="Existing YouTube URL")
    discogs_url: str | None = Field(default=None, description="Existing Discogs URL")

    def to_query(self) -> TrackQuery:
        return TrackQuery(
            artist=self.artist,
            track_name=self.track_name,
            external_id=self.id,
            youtube_url=self.youtube_url or None,
            discogs_url=self.discogs_url or None,
        )


class EnhancementOptionsInput(BaseModel):
    """Per-request enhancement switches."""

    enable_youtube: bool = Field(default=True, description="Search YouTube videos")
    enable_discogs: bool = Field(default=True, description="Resolve Discogs artists")
    skip_existing: bool = Field(
        default=True, description="Skip providers whose URL the track already has"
    )


class EnhanceTracksRequest(BaseModel):
    """Request schema for batch track enhancement."""

    tracks: list[TrackInput] = Field(..., min_length=1, description="Tracks to enhance")
    options: EnhancementOptionsInput = Field(default_factory=EnhancementOptionsInput)


class YouTubeMatchResponse(BaseModel):
    video_id: str
    title: str
    channel_title: str
    thumbnail_url: str
    video_url: str
    published_at: str

    @classmethod
    def from_dto(cls, match: YouTubeMatch) -> "YouTubeMatchResponse":
        return cls(
            video_id=match.video_id,
            title=match.title,
            channel_title=match.channel_title,
            thumbnail_url=match.thumbnail_url,
            video_url=match.video_url,
            published_at=match.published_at,
        )


class DiscogsArtistResponse(BaseModel):
    artist_id: int
    name: str
    discogs_url: str
    real_name: str | None = None
    profile_text: str | None = None
    image_url: str | None = None
    aliases: list[str] = Field(default_factory=list)

    @classmethod
    def from_dto(cls, match: DiscogsArtistMatch) -> "DiscogsArtistResponse":
        return cls(
            artist_id=match.artist_id,
            name=match.name,
            discogs_url=match.discogs_url,
            real_name=match.real_name,
            profile_text=match.profile_text,
            image_url=match.image_url,
            aliases=list(match.aliases),
        )


class EnhancedTrackResponse(BaseModel):
    """One track after enhancement, status values are success / failed / skipped."""

    id: str | None = None
    artist: str
    track_name: str
    youtube_url: str | None = None
    discogs_url: str | None = None
    youtube_status: str
    discogs_status: str
    youtube_match: YouTubeMatchResponse | None = None
    discogs_match: DiscogsArtistResponse | None = None

    @classmethod
    def from_dto(cls, track: EnhancedTrack) -> "EnhancedTrackResponse":
        return cls(
            id=track.external_id,
            artist=track.artist,
            track_name=track.track_name,
            youtube_url=track.youtube_url,
            discogs_url=track.discogs_url,
            youtube_status=track.status.youtube.value,
            discogs_status=track.status.discogs.value,
            youtube_match=(
                YouTubeMatchResponse.from_dto(track.youtube_match)
                if track.youtube_match
                else None
            ),
            discogs_match=(
                DiscogsArtistResponse.from_dto(track.discogs_match)
                if track.discogs_match
                else None
            ),
        )


class EnhancementSummaryResponse(BaseModel):
    total: int
    youtube_found: int
    youtube_skipped: int
    youtube_failed: int
    discogs_found: int
    discogs_skipped: int
    discogs_failed: int

    @classmethod
    def from_dto(cls, summary: EnhancementSummary) -> "EnhancementSummaryResponse":
        return cls(
            total=summary.total,
            youtube_found=summary.youtube_found,
            youtube_skipped=summary.youtube_skipped,
            youtube_failed=summary.youtube_failed,
            discogs_found=summary.discogs_found,
            discogs_skipped=summary.discogs_skipped,
            discogs_failed=summary.discogs_failed,
        )


class QuotaStatusResponse(BaseModel):
    """Quota snapshot. used/max are quota units per day for YouTube, requests per minute for Discogs."""

    provider: str
    used: int
    max: int
    percent_used: float
    queue_length: int
    remaining_requests: int
    window: str

    @classmethod
    def from_dto(cls, status: QuotaStatus) -> "QuotaStatusResponse":
        return cls(
            provider=status.provider,
            used=status.used,
            max=status.max,
            percent_used=round(status.percent_used, 2),
            queue_length=status.queue_length,
            remaining_requests=status.remaining_requests,
            window=status.window,
        )


class QuotaAvailabilityResponse(BaseModel):
    available: bool
    remaining: int
    message: str

    @classmethod
    def from_dto(cls, availability: QuotaAvailability) -> "QuotaAvailabilityResponse":
        return cls(
            available=availability.available,
            remaining=availability.remaining,
            message=availability.message,
        )


class EnhanceTracksResponse(BaseModel):
    """Response schema for batch track enhancement."""

    success: bool
    message: str
    tracks: list[EnhancedTrackResponse]
    summary: EnhancementSummaryResponse
    quota_usage: dict[str, QuotaStatusResponse]
    warnings: list[str] = Field(default_factory=list)


class QuotaOverviewResponse(BaseModel):
    """Quota snapshot and availability for every provider."""

    quotas: dict[str, QuotaStatusResponse]
    availability: dict[str, QuotaAvailabilityResponse]


class DiscographyProfileRequest(BaseModel):
    """Request schema for an artist's filtered discography.

    discogs_id wins over discogs_url, which wins over a name search.
    """

    artist_name: str = Field(..., min_length=1, description="Artist name")
    max_releases: int = Field(default=15, ge=1, le=100, description="Max releases returned")
    include_details: bool = Field(
        default=True, description="Fetch master/release detail for every release"
    )
    discogs_url: str | None = Field(default=None, description="Known Discogs artist URL")
    discogs_id: int | None = Field(default=None, ge=1, description="Known Discogs artist ID")


class ReleaseRecordResponse(BaseModel):
    source_release_id: int
    title: str
    year: int | None = None
    release_kind: str
    label: str
    catalog_number: str
    cover_image_url: str | None = None
    source_url: str
    formats: list[str] = Field(default_factory=list)

    @classmethod
    def from_dto(cls, record: ReleaseRecord) -> "ReleaseRecordResponse":
        return cls(
            source_release_id=record.source_release_id,
            title=record.title,
            year=record.year,
            release_kind=record.release_kind.value,
            label=record.label,
            catalog_number=record.catalog_number,
            cover_image_url=record.cover_image_url,
            source_url=record.source_url,
            formats=list(record.formats),
        )


class DiscographyProfileResponse(BaseModel):
    success: bool
    artist_name: str
    artist_info: DiscogsArtistResponse | None = None
    releases: list[ReleaseRecordResponse] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_dto(cls, result: DiscographyResult) -> "DiscographyProfileResponse":
        return cls(
            success=result.success,
            artist_name=result.artist_name,
            artist_info=(
                DiscogsArtistResponse.from_dto(result.artist_info)
                if result.artist_info
                else None
            ),
            releases=[ReleaseRecordResponse.from_dto(r) for r in result.releases],
            error=result.error,
        )
