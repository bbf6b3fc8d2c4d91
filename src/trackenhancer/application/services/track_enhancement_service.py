# Hey future me - this is the batch orchestrator for playlist track enhancement!
#
# Input: a list of raw track entries (artist + track name). Output: every track with
# a YouTube video and a Discogs artist attached where we found one, plus a summary
# and a quota snapshot. The batch NEVER fails as a whole - a provider call that
# blows up marks that one track "failed" and we move on.
#
# The two phases run one after the other: all YouTube searches, then all Discogs
# lookups. Running them concurrently would be faster, but sequential phases keep
# progress reporting and quota bookkeeping simple. Within a phase every call goes
# through the provider's rate limiter anyway, so there's no parallelism to gain there.
#
# Dedup rules (don't mix them up!):
# - YouTube: identical (artist, track_name) pairs are searched ONCE
# - Discogs: one lookup per artist, keyed on the trimmed lower-cased name
"""Track Enhancement Service - batch YouTube + Discogs enrichment for track lists."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from trackenhancer.domain.dtos import (
    BatchEnhancementResult,
    DiscogsArtistMatch,
    EnhancedTrack,
    EnhancementStats,
    EnhancementStatus,
    EnhancementSummary,
    QuotaAvailability,
    QuotaStatus,
    TrackQuery,
    YouTubeMatch,
)
from trackenhancer.domain.exceptions import ValidationError
from trackenhancer.domain.value_objects.provider_types import (
    EnhancementOutcome,
    Provider,
)
from trackenhancer.domain.value_objects.query_normalization import (
    artist_key,
    normalize_artist_name,
)
from trackenhancer.infrastructure.observability import log_operation

if TYPE_CHECKING:
    from trackenhancer.domain.ports import IDiscogsClient, IYouTubeClient

logger = logging.getLogger(__name__)

# (completed, total, current label, phase) - phase is "youtube", "discogs" or "completed"
ProgressCallback = Callable[[int, int, str, str], Awaitable[None] | None]
QuotaWarningCallback = Callable[[Provider, QuotaStatus], Awaitable[None] | None]

PHASE_YOUTUBE = "youtube"
PHASE_DISCOGS = "discogs"
PHASE_COMPLETED = "completed"


@dataclass
class EnhancementOptions:
    """Knobs for one enhance_batch run.

    Attributes:
        enable_youtube: Run the YouTube phase
        enable_discogs: Run the Discogs phase
        skip_existing: Don't re-query a provider for tracks that already carry its URL
        normalize_artists: Strip articles/featuring credits before Discogs lookups
        on_progress: Called after every provider lookup (sync or async)
        on_quota_warning: Called when a provider's usage crosses the warning threshold
    """

    enable_youtube: bool = True
    enable_discogs: bool = True
    skip_existing: bool = True
    normalize_artists: bool = False
    on_progress: ProgressCallback | None = None
    on_quota_warning: QuotaWarningCallback | None = None


class TrackEnhancementService:
    """Orchestrates batch enhancement across the YouTube and Discogs clients.

    Usage:
        service = TrackEnhancementService(youtube_client, discogs_client)
        result = await service.enhance_batch(tracks, EnhancementOptions(enable_discogs=False))
        print(result.summary.youtube_found)
    """

    def __init__(
        self,
        youtube_client: IYouTubeClient,
        discogs_client: IDiscogsClient,
        quota_warning_percent: float = 80.0,
    ) -> None:
        """Initialize track enhancement service.

        Args:
            youtube_client: YouTube search client (rate limited)
            discogs_client: Discogs client (rate limited)
            quota_warning_percent: Usage percentage that triggers on_quota_warning
        """
        self._youtube = youtube_client
        self._discogs = discogs_client
        self._quota_warning_percent = quota_warning_percent

    async def enhance_batch(
        self,
        tracks: Sequence[TrackQuery],
        options: EnhancementOptions | None = None,
    ) -> BatchEnhancementResult:
        """Enhance a list of tracks with YouTube videos and Discogs artists.

        Process:
        1. Work out which tracks each provider still needs (skip-existing policy)
        2. YouTube phase: one search per unique (artist, track_name)
        3. Discogs phase: one artist lookup per unique artist
        4. Merge results back onto every track, count the summary

        Args:
            tracks: Track entries to enhance
            options: Phase toggles, skip policy and callbacks

        Returns:
            Enhanced tracks (input order), summary and quota snapshot
        """
        options = options or EnhancementOptions()

        needs_youtube = [
            t for t in tracks if options.enable_youtube and self._needs_youtube(t, options)
        ]
        needs_discogs = [
            t for t in tracks if options.enable_discogs and self._needs_discogs(t, options)
        ]

        unsearchable = [t for t in tracks if not t.artist.strip()]
        if unsearchable:
            logger.warning(
                f"{len(unsearchable)} track(s) without an artist, not sending them to any provider"
            )

        youtube_queries = list(
            dict.fromkeys(
                (t.artist, t.track_name) for t in needs_youtube if t.artist.strip()
            )
        )
        discogs_artists: dict[str, str] = {}
        for track in needs_discogs:
            lookup_name = self._discogs_lookup_name(track, options)
            if lookup_name.strip():
                discogs_artists.setdefault(artist_key(lookup_name), lookup_name)

        total_lookups = len(youtube_queries) + len(discogs_artists)
        progress = _Progress(options.on_progress, total_lookups)

        async with log_operation(
            logger,
            "enhance_batch",
            tracks=len(tracks),
            youtube_lookups=len(youtube_queries),
            discogs_lookups=len(discogs_artists),
        ) as ctx:
            youtube_results: dict[tuple[str, str], YouTubeMatch | None] = {}
            if youtube_queries:
                await progress.report("Starting YouTube search...", PHASE_YOUTUBE, advance=False)
                for artist, track_name in youtube_queries:
                    youtube_results[(artist, track_name)] = await self._search_youtube(
                        artist, track_name
                    )
                    await progress.report(f"{artist} - {track_name}", PHASE_YOUTUBE)
                await self._check_quota_warning(Provider.YOUTUBE, options)

            discogs_results: dict[str, DiscogsArtistMatch | None] = {}
            if discogs_artists:
                await progress.report("Starting Discogs search...", PHASE_DISCOGS, advance=False)
                for key, name in discogs_artists.items():
                    discogs_results[key] = await self._search_discogs(name)
                    await progress.report(name, PHASE_DISCOGS)
                await self._check_quota_warning(Provider.DISCOGS, options)

            enhanced = [
                self._merge(track, options, youtube_results, discogs_results)
                for track in tracks
            ]
            summary = summarize(enhanced)
            ctx["youtube_found"] = summary.youtube_found
            ctx["discogs_found"] = summary.discogs_found

        await progress.finish("Enhancement completed", PHASE_COMPLETED)

        return BatchEnhancementResult(
            tracks=enhanced,
            summary=summary,
            quota_usage={
                Provider.YOUTUBE: self._youtube.get_quota_status(),
                Provider.DISCOGS: self._discogs.get_quota_status(),
            },
        )

    async def enhance_track(
        self,
        track: TrackQuery,
        options: EnhancementOptions | None = None,
    ) -> EnhancedTrack:
        """Enhance a single track.

        Same rules as enhance_batch, except the Discogs lookup uses the normalized
        artist name ("The Cinematic Orchestra feat. X" → "Cinematic Orchestra").
        """
        options = replace(options or EnhancementOptions(), normalize_artists=True)
        result = await self.enhance_batch([track], options)
        return result.tracks[0]

    # Hey future me, a provider that's switched off for this run still gets a "skipped"
    # status AND counts into the skipped bucket, so found + skipped + failed == total
    # always holds per provider.
    @staticmethod
    def _needs_youtube(track: TrackQuery, options: EnhancementOptions) -> bool:
        return not (options.skip_existing and track.youtube_url)

    @staticmethod
    def _needs_discogs(track: TrackQuery, options: EnhancementOptions) -> bool:
        return not (options.skip_existing and track.discogs_url)

    @staticmethod
    def _discogs_lookup_name(track: TrackQuery, options: EnhancementOptions) -> str:
        if options.normalize_artists:
            return normalize_artist_name(track.artist)
        return track.artist

    async def _search_youtube(self, artist: str, track_name: str) -> YouTubeMatch | None:
        try:
            return await self._youtube.search_video(artist, track_name)
        except Exception as e:
            logger.error(
                f"YouTube search failed for {artist} - {track_name}: {e}", exc_info=True
            )
            return None

    async def _search_discogs(self, artist: str) -> DiscogsArtistMatch | None:
        try:
            return await self._discogs.search_artist(artist)
        except Exception as e:
            logger.error(f"Discogs search failed for {artist}: {e}", exc_info=True)
            return None

    # Tracks left out of the lookups (blank artist) find no result here, so every
    # enabled provider reports them "failed".
    def _merge(
        self,
        track: TrackQuery,
        options: EnhancementOptions,
        youtube_results: dict[tuple[str, str], YouTubeMatch | None],
        discogs_results: dict[str, DiscogsArtistMatch | None],
    ) -> EnhancedTrack:
        youtube_outcome = EnhancementOutcome.SKIPPED
        youtube_match: YouTubeMatch | None = None
        youtube_url = track.youtube_url
        if options.enable_youtube and self._needs_youtube(track, options):
            youtube_match = youtube_results.get((track.artist, track.track_name))
            if youtube_match is not None:
                youtube_outcome = EnhancementOutcome.SUCCESS
                youtube_url = youtube_match.video_url
            else:
                youtube_outcome = EnhancementOutcome.FAILED

        discogs_outcome = EnhancementOutcome.SKIPPED
        discogs_match: DiscogsArtistMatch | None = None
        discogs_url = track.discogs_url
        if options.enable_discogs and self._needs_discogs(track, options):
            key = artist_key(self._discogs_lookup_name(track, options))
            discogs_match = discogs_results.get(key)
            if discogs_match is not None:
                discogs_outcome = EnhancementOutcome.SUCCESS
                discogs_url = discogs_match.discogs_url
            else:
                discogs_outcome = EnhancementOutcome.FAILED

        return EnhancedTrack(
            artist=track.artist,
            track_name=track.track_name,
            status=EnhancementStatus(youtube=youtube_outcome, discogs=discogs_outcome),
            external_id=track.external_id,
            youtube_url=youtube_url,
            discogs_url=discogs_url,
            youtube_match=youtube_match,
            discogs_match=discogs_match,
        )

    async def _check_quota_warning(
        self, provider: Provider, options: EnhancementOptions
    ) -> None:
        status = self.get_quota_status(provider)
        if status.percent_used < self._quota_warning_percent:
            return

        logger.warning(
            f"{provider.value} quota at {status.percent_used:.1f}% "
            f"({status.used}/{status.max} per {status.window})"
        )
        if options.on_quota_warning is None:
            return
        try:
            await _maybe_await(options.on_quota_warning(provider, status))
        except Exception as e:
            logger.warning(f"Quota warning callback failed: {e}", exc_info=True)

    def get_quota_status(self, provider: Provider | str) -> QuotaStatus:
        """Quota snapshot for one provider.

        Raises:
            ValidationError: If the provider name is unknown
        """
        parsed = provider if isinstance(provider, Provider) else Provider.from_string(provider)
        if parsed is Provider.YOUTUBE:
            return self._youtube.get_quota_status()
        if parsed is Provider.DISCOGS:
            return self._discogs.get_quota_status()
        raise ValidationError(f"Unknown provider: {provider}")

    def check_quotas(self) -> dict[Provider, QuotaAvailability]:
        """Can each provider take more work right now?

        YouTube is unavailable once the daily budget can't cover another search.
        Discogs is unavailable while its per-minute window is full. A provider
        without credentials still reports its counters, the batch degrades to
        "failed" lookups for it instead of refusing to start.
        """
        youtube = self._youtube.get_quota_status()
        if youtube.remaining_requests <= 0:
            youtube_availability = QuotaAvailability(
                available=False,
                remaining=0,
                message="YouTube daily quota exhausted, resets at midnight UTC",
            )
        else:
            youtube_availability = QuotaAvailability(
                available=True,
                remaining=youtube.remaining_requests,
                message=f"{youtube.remaining_requests} YouTube searches remaining today",
            )

        discogs = self._discogs.get_quota_status()
        if discogs.remaining_requests <= 0:
            discogs_availability = QuotaAvailability(
                available=False,
                remaining=0,
                message="Discogs rate limit reached, please wait a moment",
            )
        else:
            discogs_availability = QuotaAvailability(
                available=True,
                remaining=discogs.remaining_requests,
                message=f"{discogs.remaining_requests} Discogs requests remaining this {discogs.window}",
            )

        return {Provider.YOUTUBE: youtube_availability, Provider.DISCOGS: discogs_availability}


class _Progress:
    """Progress bookkeeping for one batch. Callback errors never abort the batch."""

    def __init__(self, callback: ProgressCallback | None, total: int) -> None:
        self._callback = callback
        self.total = total
        self.completed = 0

    async def report(self, label: str, phase: str, advance: bool = True) -> None:
        if advance:
            self.completed += 1
        await self._emit(self.completed, label, phase)

    async def finish(self, label: str, phase: str) -> None:
        self.completed = self.total
        await self._emit(self.completed, label, phase)

    async def _emit(self, completed: int, label: str, phase: str) -> None:
        if self._callback is None:
            return
        try:
            await _maybe_await(self._callback(completed, self.total, label, phase))
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}", exc_info=True)


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


def summarize(tracks: Sequence[EnhancedTrack]) -> EnhancementSummary:
    """Count per-provider outcomes over enhanced tracks."""
    counts = {
        (provider, outcome): 0
        for provider in Provider
        for outcome in EnhancementOutcome
    }
    for track in tracks:
        counts[(Provider.YOUTUBE, track.status.youtube)] += 1
        counts[(Provider.DISCOGS, track.status.discogs)] += 1

    return EnhancementSummary(
        total=len(tracks),
        youtube_found=counts[(Provider.YOUTUBE, EnhancementOutcome.SUCCESS)],
        youtube_skipped=counts[(Provider.YOUTUBE, EnhancementOutcome.SKIPPED)],
        youtube_failed=counts[(Provider.YOUTUBE, EnhancementOutcome.FAILED)],
        discogs_found=counts[(Provider.DISCOGS, EnhancementOutcome.SUCCESS)],
        discogs_skipped=counts[(Provider.DISCOGS, EnhancementOutcome.SKIPPED)],
        discogs_failed=counts[(Provider.DISCOGS, EnhancementOutcome.FAILED)],
    )


def format_tracks_for_storage(tracks: Sequence[EnhancedTrack]) -> list[dict[str, Any]]:
    """Flatten enhanced tracks to the storage shape (URLs only, None when missing)."""
    return [
        {
            "id": track.external_id,
            "artist": track.artist,
            "track_name": track.track_name,
            "youtube_url": track.youtube_url or None,
            "discogs_url": track.discogs_url or None,
        }
        for track in tracks
    ]


def get_enhancement_stats(tracks: Sequence[EnhancedTrack]) -> EnhancementStats:
    """Coverage over a track list, counting URLs from any source (found or pre-existing)."""
    total = len(tracks)
    with_youtube = sum(1 for t in tracks if t.youtube_url)
    with_discogs = sum(1 for t in tracks if t.discogs_url)
    with_both = sum(1 for t in tracks if t.youtube_url and t.discogs_url)
    # Share of filled provider slots: every track has one YouTube and one Discogs slot.
    percentage = ((with_youtube + with_discogs) / (total * 2) * 100.0) if total else 0.0
    return EnhancementStats(
        total=total,
        with_youtube=with_youtube,
        with_discogs=with_discogs,
        with_both=with_both,
        enhancement_percentage=round(percentage, 2),
    )
