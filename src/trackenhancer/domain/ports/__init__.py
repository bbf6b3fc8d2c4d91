"""Port interfaces for the enhancement pipeline.

The application services only talk to these ABCs, so tests can hand in mocks and
a deployment can swap the in-memory quota store for a shared one.
"""

from abc import ABC, abstractmethod
from typing import Any

from trackenhancer.domain.dtos import (
    DiscogsArtistMatch,
    QuotaState,
    QuotaStatus,
    YouTubeMatch,
)


class IQuotaStore(ABC):
    """Port for quota counter persistence.

    Hey future me - the default is InMemoryQuotaStore (one process, one set of counters).
    If this ever runs on more than one instance, implement this against a shared store
    keyed by provider, the RateLimiter control logic doesn't need to change.
    """

    @abstractmethod
    def load(self, provider: str) -> QuotaState:
        """
        Load the quota state for a provider.

        Args:
            provider: Provider name (e.g. "youtube")

        Returns:
            Current state, a fresh QuotaState if none was stored yet
        """
        pass

    @abstractmethod
    def save(self, provider: str, state: QuotaState) -> None:
        """
        Persist the quota state for a provider.

        Args:
            provider: Provider name
            state: State to store
        """
        pass


class IYouTubeClient(ABC):
    """Port for YouTube search operations."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when an API key is available."""
        pass

    @abstractmethod
    async def search_video(
        self,
        artist: str,
        track_name: str,
        *,
        max_results: int = 1,
        safe_search: str = "moderate",
        video_only: bool = True,
    ) -> YouTubeMatch | None:
        """
        Search for the best video for an artist/track pair.

        Args:
            artist: Artist name
            track_name: Track title
            max_results: Number of results requested from the provider
            safe_search: YouTube safeSearch setting
            video_only: Restrict results to videos

        Returns:
            Top video match or None
        """
        pass

    @abstractmethod
    def get_quota_status(self) -> QuotaStatus:
        """Snapshot of the client's rate limiter."""
        pass


class IDiscogsClient(ABC):
    """Port for Discogs API operations."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when an API token is available."""
        pass

    @abstractmethod
    async def search_artist(
        self, name: str, *, max_candidates: int | None = None
    ) -> DiscogsArtistMatch | None:
        """
        Resolve an artist name to the best matching Discogs artist.

        Args:
            name: Artist name
            max_candidates: Search results to score (defaults to settings)

        Returns:
            Artist match or None
        """
        pass

    @abstractmethod
    async def get_artist_match(self, artist_id: int) -> DiscogsArtistMatch | None:
        """
        Build an artist match directly from a known Discogs artist ID.

        Args:
            artist_id: Discogs artist ID

        Returns:
            Artist match or None if not found
        """
        pass

    @abstractmethod
    async def get_artist_releases(
        self,
        artist_id: int,
        *,
        page: int = 1,
        per_page: int = 50,
        sort: str = "year",
        sort_order: str = "desc",
    ) -> dict[str, Any] | None:
        """
        Fetch one page of an artist's releases.

        Args:
            artist_id: Discogs artist ID
            page: 1-based page number
            per_page: Page size (max 100)
            sort: Sort key (year, title, format)
            sort_order: asc or desc

        Returns:
            Raw payload with "releases" and "pagination", or None on failure
        """
        pass

    @abstractmethod
    async def get_release(self, release_id: int) -> dict[str, Any] | None:
        """Fetch release detail, None if not found or failed."""
        pass

    @abstractmethod
    async def get_master(self, master_id: int) -> dict[str, Any] | None:
        """Fetch master release detail, None if not found or failed."""
        pass

    @abstractmethod
    def get_quota_status(self) -> QuotaStatus:
        """Snapshot of the client's rate limiter."""
        pass


__all__ = ["IDiscogsClient", "IQuotaStore", "IYouTubeClient"]
