"""
Data Transfer Objects for the track enhancement pipeline.

Hey future me - these DTOs are the common language between the provider clients,
the discography service and the batch orchestrator. Provider clients turn raw JSON
into these shapes, so nothing above the infrastructure layer ever touches a
YouTube snippet or a Discogs payload directly.

Matches and release records are frozen: once a client hands one out, nobody
mutates it. Partial matches don't exist - a match is either fully built or None.
"""

from dataclasses import dataclass, field

from trackenhancer.domain.value_objects.provider_types import (
    EnhancementOutcome,
    Provider,
    ReleaseKind,
)


# The youtube_url / discogs_url fields are what the skip-existing policy looks at:
# a track that already carries a URL for a provider is not sent to that provider again.
# A blank artist is allowed here; the orchestrator reports such a track as failed.
@dataclass(frozen=True)
class TrackQuery:
    """One playlist entry to enhance."""

    artist: str
    track_name: str
    external_id: str | None = None
    youtube_url: str | None = None
    discogs_url: str | None = None

    @property
    def label(self) -> str:
        """Human readable "Artist - Track" label for logs and progress."""
        if self.track_name:
            return f"{self.artist} - {self.track_name}"
        return self.artist


@dataclass(frozen=True)
class YouTubeMatch:
    """Top YouTube search hit for an artist/track query."""

    video_id: str
    title: str
    channel_title: str
    thumbnail_url: str
    video_url: str
    published_at: str


@dataclass(frozen=True)
class DiscogsArtistMatch:
    """Resolved Discogs artist, combined from search + artist detail endpoints."""

    artist_id: int
    name: str
    discogs_url: str
    real_name: str | None = None
    profile_text: str | None = None
    image_url: str | None = None
    aliases: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReleaseRecord:
    """Normalized discography entry."""

    source_release_id: int
    title: str
    year: int | None
    release_kind: ReleaseKind
    label: str
    catalog_number: str
    cover_image_url: str | None
    source_url: str
    formats: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EnhancementStatus:
    """Outcome per provider for one track."""

    youtube: EnhancementOutcome = EnhancementOutcome.SKIPPED
    discogs: EnhancementOutcome = EnhancementOutcome.SKIPPED


@dataclass(frozen=True)
class EnhancedTrack:
    """A TrackQuery merged with whatever the providers found for it."""

    artist: str
    track_name: str
    status: EnhancementStatus
    external_id: str | None = None
    youtube_url: str | None = None
    discogs_url: str | None = None
    youtube_match: YouTubeMatch | None = None
    discogs_match: DiscogsArtistMatch | None = None


@dataclass
class QuotaState:
    """Mutable quota counters for one provider.

    Only the provider's RateLimiter writes this, always through an IQuotaStore.
    window_start is on the limiter's monotonic clock; day_key is the UTC day
    number (epoch seconds // 86400) the daily counter belongs to.
    """

    window_start: float = 0.0
    requests_in_window: int = 0
    daily_budget_used: int = 0
    day_key: int = -1


@dataclass(frozen=True)
class QuotaStatus:
    """Read-only snapshot of a provider's quota usage."""

    provider: str
    used: int
    max: int
    percent_used: float
    queue_length: int
    remaining_requests: int
    window: str


@dataclass(frozen=True)
class EnhancementSummary:
    """Per-provider counters for one batch run.

    Invariant: found + skipped + failed == total for each provider.
    """

    total: int = 0
    youtube_found: int = 0
    youtube_skipped: int = 0
    youtube_failed: int = 0
    discogs_found: int = 0
    discogs_skipped: int = 0
    discogs_failed: int = 0


@dataclass(frozen=True)
class BatchEnhancementResult:
    """Everything enhance_batch hands back to its caller."""

    tracks: list[EnhancedTrack]
    summary: EnhancementSummary
    quota_usage: dict[Provider, QuotaStatus]


@dataclass(frozen=True)
class QuotaAvailability:
    """Whether a provider can take more work right now."""

    available: bool
    remaining: int
    message: str


@dataclass(frozen=True)
class EnhancementStats:
    """Coverage statistics over a list of enhanced tracks."""

    total: int
    with_youtube: int
    with_discogs: int
    with_both: int
    enhancement_percentage: float


@dataclass(frozen=True)
class DiscographyResult:
    """Artist info plus filtered discography for profile generation.

    success=False always comes with an error message; releases is empty then.
    """

    success: bool
    artist_name: str
    releases: list[ReleaseRecord] = field(default_factory=list)
    artist_info: DiscogsArtistMatch | None = None
    error: str | None = None


__all__ = [
    "BatchEnhancementResult",
    "DiscogsArtistMatch",
    "DiscographyResult",
    "EnhancedTrack",
    "EnhancementStats",
    "EnhancementStatus",
    "EnhancementSummary",
    "QuotaAvailability",
    "QuotaState",
    "QuotaStatus",
    "ReleaseRecord",
    "TrackQuery",
    "YouTubeMatch",
]
