"""Discogs API client with rate limiting and best-match artist resolution."""

import logging
import re
from functools import partial
from typing import Any

import httpx

from trackenhancer.config.settings import DiscogsSettings
from trackenhancer.domain.dtos import DiscogsArtistMatch, QuotaStatus
from trackenhancer.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    RateLimitExceededError,
)
from trackenhancer.domain.ports import IDiscogsClient
from trackenhancer.domain.value_objects.artist_matching import (
    CandidateScorer,
    candidate_name,
    pick_best_candidate,
    score_artist_candidate,
)
from trackenhancer.domain.value_objects.provider_types import Provider, ReleaseKind
from trackenhancer.domain.value_objects.query_normalization import clean_query_text
from trackenhancer.infrastructure.rate_limiter import RateLimiter, get_discogs_limiter

logger = logging.getLogger(__name__)

DISCOGS_WEB_URL = "https://www.discogs.com"
MAX_PER_PAGE = 100

_ARTIST_URL_PATTERN = re.compile(r"/artist/(\d+)")


def build_artist_url(artist_id: int) -> str:
    return f"{DISCOGS_WEB_URL}/artist/{artist_id}"


def build_release_url(release_id: int, kind: ReleaseKind) -> str:
    return f"{DISCOGS_WEB_URL}/{kind.value}/{release_id}"


def extract_artist_id(url: str | None) -> int | None:
    """Get the artist ID from URLs like https://www.discogs.com/artist/12345-Bonobo."""
    if not url:
        return None
    match = _ARTIST_URL_PATTERN.search(url)
    return int(match.group(1)) if match else None


def error_from_response(response: httpx.Response) -> ExternalServiceError:
    """Build a domain error from Discogs' {"message": "..."} error envelope."""
    message = response.reason_phrase or "request failed"
    try:
        message = response.json().get("message") or message
    except ValueError:
        if response.text:
            message = response.text[:200]

    text = f"Discogs API error ({response.status_code}): {message}"
    if response.status_code == 429:
        return RateLimitExceededError(
            text, provider=Provider.DISCOGS.value, status_code=response.status_code
        )
    return ExternalServiceError(
        text, provider=Provider.DISCOGS.value, status_code=response.status_code
    )


class DiscogsClient(IDiscogsClient):
    """HTTP client for Discogs database operations, all calls go through the Discogs limiter."""

    def __init__(
        self,
        settings: DiscogsSettings,
        rate_limiter: RateLimiter | None = None,
        scorer: CandidateScorer = score_artist_candidate,
    ) -> None:
        """
        Initialize Discogs client.

        Args:
            settings: Discogs configuration settings
            rate_limiter: Limiter to use, defaults to the process-wide Discogs limiter
            scorer: Candidate scoring function for artist disambiguation
        """
        self.settings = settings
        self._rate_limiter = rate_limiter or get_discogs_limiter()
        self._scorer = scorer
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.api_token and self.settings.api_token.strip())

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    # Listen future me, Discogs REJECTS requests without a User-Agent identifying the app,
    # and only authenticated requests get the 60/minute limit (25 otherwise).
    def _headers(self) -> dict[str, str]:
        if not self.is_configured:
            raise ConfigurationError("DISCOGS_API_TOKEN not configured")
        return {
            "Authorization": f"Discogs token={self.settings.api_token}",
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers=self._headers(),
                timeout=self.settings.timeout_seconds,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _fetch_json(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Execute one GET request. Runs inside the rate limiter.

        Raises:
            ConfigurationError: If no token is configured
            ExternalServiceError: On non-2xx responses
            httpx.HTTPError: On transport failures
        """
        client = await self._get_client()
        response = await client.get(path, params=params)
        if response.is_error:
            raise error_from_response(response)
        payload: dict[str, Any] = response.json()
        return payload

    async def _get(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self._rate_limiter.enqueue(partial(self._fetch_json, path, params))

    async def _get_or_none(self, path: str, what: str) -> dict[str, Any] | None:
        """GET a detail resource, 404 and provider errors become None."""
        if not self.is_configured:
            logger.warning(f"DISCOGS_API_TOKEN not configured, cannot fetch {what}")
            return None
        try:
            return await self._get(path)
        except ExternalServiceError as e:
            if e.status_code == 404:
                logger.info(f"Discogs {what} not found")
            else:
                logger.warning(f"Discogs {what} lookup failed: {e.message}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Discogs {what} request error: {type(e).__name__}: {e}")
            return None

    # Hey future me, this is a TWO-PHASE lookup on purpose. The search endpoint returns thin
    # records (name, thumb, id). Profile text and aliases only come from /artists/{id}, and
    # downstream consumers need them. So: search → score → detail fetch. Two calls through
    # the limiter per artist, that's why the orchestrator dedupes artists before calling us.
    async def search_artist(
        self, name: str, *, max_candidates: int | None = None
    ) -> DiscogsArtistMatch | None:
        """
        Search Discogs for an artist and resolve the best candidate.

        Args:
            name: Artist name (quotes are stripped)
            max_candidates: Search results to score, defaults to settings.search_candidates

        Returns:
            Fully populated artist match, or None

        Raises:
            ValueError: If Discogs answers 2xx with a body that isn't JSON
        """
        if not self.is_configured:
            logger.warning("DISCOGS_API_TOKEN not configured, skipping Discogs search")
            return None

        query = clean_query_text(name)
        if not query:
            logger.debug("Empty Discogs query after cleaning, nothing to search")
            return None

        per_page = max_candidates or self.settings.search_candidates
        logger.debug(f'Discogs artist search: original "{name}", query "{query}"')

        try:
            payload = await self._get(
                "/database/search",
                {"q": query, "type": "artist", "per_page": per_page},
            )
        except ExternalServiceError as e:
            logger.warning(f'Discogs search failed for "{name}": {e.message}')
            return None
        except httpx.HTTPError as e:
            logger.warning(f'Discogs request error for "{name}": {type(e).__name__}: {e}')
            return None

        candidates = [
            result
            for result in payload.get("results") or []
            if result.get("type") == "artist" and result.get("id") is not None
        ]
        best = pick_best_candidate(query, candidates, scorer=self._scorer)
        if best is None:
            logger.info(f'No Discogs artist found for "{name}"')
            return None

        logger.debug(
            f'Discogs best candidate for "{query}": "{candidate_name(best)}" '
            f"(score {self._scorer(query, best)}, {len(candidates)} candidates)"
        )

        details = await self.get_artist(int(best["id"]))
        if details is None:
            return None

        match = self._to_artist_match(details, fallback_image=best.get("thumb"))
        logger.info(f"Found Discogs artist: {match.name} ({match.artist_id})")
        return match

    async def get_artist(self, artist_id: int) -> dict[str, Any] | None:
        """
        Fetch full artist detail (profile, aliases, images).

        Args:
            artist_id: Discogs artist ID

        Returns:
            Raw artist payload or None if not found / failed
        """
        return await self._get_or_none(f"/artists/{artist_id}", f"artist {artist_id}")

    async def get_artist_match(self, artist_id: int) -> DiscogsArtistMatch | None:
        """Build an artist match straight from a known artist ID (no search)."""
        details = await self.get_artist(artist_id)
        if details is None:
            return None
        return self._to_artist_match(details)

    def _to_artist_match(
        self, details: dict[str, Any], fallback_image: str | None = None
    ) -> DiscogsArtistMatch:
        artist_id = int(details["id"])
        images = details.get("images") or []
        image_url = None
        if images:
            image_url = images[0].get("uri150") or images[0].get("uri")

        return DiscogsArtistMatch(
            artist_id=artist_id,
            name=details.get("name") or "",
            discogs_url=build_artist_url(artist_id),
            real_name=details.get("realname") or None,
            profile_text=details.get("profile") or None,
            image_url=image_url or fallback_image or None,
            aliases=tuple(
                alias["name"] for alias in details.get("aliases") or [] if alias.get("name")
            ),
        )

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
        Fetch one page of an artist's release list.

        Args:
            artist_id: Discogs artist ID
            page: 1-based page number
            per_page: Page size, capped at 100 by Discogs
            sort: year, title or format
            sort_order: asc or desc

        Returns:
            Payload with "releases" and "pagination", or None on failure
        """
        if not self.is_configured:
            logger.warning("DISCOGS_API_TOKEN not configured, cannot fetch releases")
            return None

        params = {
            "page": page,
            "per_page": min(max(per_page, 1), MAX_PER_PAGE),
            "sort": sort,
            "sort_order": sort_order,
        }
        try:
            payload = await self._get(f"/artists/{artist_id}/releases", params)
        except ExternalServiceError as e:
            logger.warning(f"Discogs releases failed for artist {artist_id}: {e.message}")
            return None
        except httpx.HTTPError as e:
            logger.warning(
                f"Discogs releases request error for artist {artist_id}: "
                f"{type(e).__name__}: {e}"
            )
            return None

        logger.debug(
            f"Discogs returned {len(payload.get('releases') or [])} releases "
            f"for artist {artist_id} (page {page})"
        )
        return payload

    async def get_release(self, release_id: int) -> dict[str, Any] | None:
        """Fetch a concrete release (one pressing/edition)."""
        return await self._get_or_none(f"/releases/{release_id}", f"release {release_id}")

    async def get_master(self, master_id: int) -> dict[str, Any] | None:
        """Fetch a master release (the abstract album across pressings)."""
        return await self._get_or_none(f"/masters/{master_id}", f"master {master_id}")

    async def get_artist_genres(self, artist_id: int, limit: int = 5) -> list[str]:
        """
        Collect genres and styles from an artist's most recent releases.

        Args:
            artist_id: Discogs artist ID
            limit: Max number of genre/style names returned

        Returns:
            Unique genre/style names in first-seen order
        """
        payload = await self.get_artist_releases(artist_id, per_page=5)
        if not payload:
            return []

        # Release objects say "genres"/"styles"; some listing payloads use the singular.
        genres: list[str] = []
        for release in payload.get("releases") or []:
            names = [
                *(release.get("genres") or release.get("genre") or []),
                *(release.get("styles") or release.get("style") or []),
            ]
            for value in names:
                if value and value not in genres:
                    genres.append(value)
        return genres[:limit]

    def get_quota_status(self) -> QuotaStatus:
        """Current Discogs usage (requests in the current minute)."""
        return self._rate_limiter.get_status()

    async def __aenter__(self) -> "DiscogsClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
