"""YouTube Data API v3 client with quota-aware rate limiting."""

import logging
from functools import partial
from typing import Any

import httpx

from trackenhancer.config.settings import YouTubeSettings
from trackenhancer.domain.dtos import QuotaStatus, YouTubeMatch
from trackenhancer.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    RateLimitExceededError,
)
from trackenhancer.domain.ports import IYouTubeClient
from trackenhancer.domain.value_objects.provider_types import Provider
from trackenhancer.domain.value_objects.query_normalization import build_search_query
from trackenhancer.domain.value_objects.youtube_urls import build_watch_url
from trackenhancer.infrastructure.rate_limiter import RateLimiter, get_youtube_limiter

logger = logging.getLogger(__name__)

# Error reasons YouTube uses when the project ran out of quota or is being throttled.
QUOTA_ERROR_REASONS = frozenset(
    {"quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded", "userRateLimitExceeded"}
)


def parse_search_item(payload: dict[str, Any]) -> YouTubeMatch | None:
    """Map the first search result onto a YouTubeMatch.

    Hey future me - we deliberately do NO re-ranking here. YouTube's relevance order is
    the ranking: accept the top hit or nothing. If that top hit is a channel or playlist
    (no id.videoId) we return None instead of digging further down the list.

    Args:
        payload: Decoded search.list response

    Returns:
        Match for the first item, or None
    """
    items = payload.get("items") or []
    if not items:
        return None

    first = items[0]
    video_id = (first.get("id") or {}).get("videoId")
    if not video_id:
        return None

    snippet = first.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = thumbnails.get("medium") or thumbnails.get("default") or {}

    return YouTubeMatch(
        video_id=video_id,
        title=snippet.get("title", ""),
        channel_title=snippet.get("channelTitle", ""),
        thumbnail_url=thumbnail.get("url", ""),
        video_url=build_watch_url(video_id),
        published_at=snippet.get("publishedAt", ""),
    )


def error_from_response(response: httpx.Response) -> ExternalServiceError:
    """Build a domain error from YouTube's error envelope.

    YouTube answers errors as {"error": {"code", "message", "errors": [{"reason"}]}}.
    Quota problems come back as 403 with reason quotaExceeded, not as 429.
    """
    message = response.reason_phrase or "request failed"
    reason: str | None = None
    try:
        envelope = response.json().get("error") or {}
        message = envelope.get("message") or message
        errors = envelope.get("errors") or []
        if errors:
            reason = errors[0].get("reason")
    except ValueError:
        if response.text:
            message = response.text[:200]

    text = f"YouTube API error ({response.status_code}): {message}"
    if response.status_code == 429 or reason in QUOTA_ERROR_REASONS:
        return RateLimitExceededError(
            text, provider=Provider.YOUTUBE.value, status_code=response.status_code, reason=reason
        )
    return ExternalServiceError(
        text, provider=Provider.YOUTUBE.value, status_code=response.status_code, reason=reason
    )


class YouTubeClient(IYouTubeClient):
    """HTTP client for YouTube video search, all calls go through the YouTube limiter."""

    # Hey future me, a missing API key is NOT an exception for callers! The integration
    # is optional - search_video() logs and returns None, and the limiter never sees a
    # request, so quota status stays at zero.
    def __init__(
        self,
        settings: YouTubeSettings,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """
        Initialize YouTube client.

        Args:
            settings: YouTube configuration settings
            rate_limiter: Limiter to use, defaults to the process-wide YouTube limiter
        """
        self.settings = settings
        self._rate_limiter = rate_limiter or get_youtube_limiter()
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.api_key and self.settings.api_key.strip())

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    # The timeout matters more than usual: the limiter queue is strictly sequential, so
    # ONE hung request blocks every search behind it.
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers={"Accept": "application/json"},
                timeout=self.settings.timeout_seconds,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _fetch_search(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Execute one search.list call. Runs inside the rate limiter.

        Raises:
            ConfigurationError: If no API key is configured
            ExternalServiceError: On non-2xx responses
            httpx.HTTPError: On transport failures
        """
        if not self.is_configured:
            raise ConfigurationError("YOUTUBE_API_KEY not configured")

        client = await self._get_client()
        response = await client.get(
            "/search", params={**params, "key": self.settings.api_key}
        )
        if response.is_error:
            raise error_from_response(response)
        payload: dict[str, Any] = response.json()
        return payload

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
        Search YouTube for a video by artist and track name.

        Args:
            artist: Artist name (quotes are stripped)
            track_name: Track title (quotes are stripped)
            max_results: Results requested from YouTube, only the first is used
            safe_search: moderate, none or strict
            video_only: Restrict to type=video

        Returns:
            Top video match, or None if nothing usable was found or the call failed

        Raises:
            ValueError: If YouTube answers 2xx with a body that isn't JSON
        """
        if not self.is_configured:
            logger.warning("YOUTUBE_API_KEY not configured, skipping YouTube search")
            return None

        query = build_search_query(artist, track_name)
        if not query:
            logger.debug("Empty YouTube query after cleaning, nothing to search")
            return None

        logger.debug(
            f'YouTube search: original "{artist}" - "{track_name}", query "{query}"'
        )

        params: dict[str, Any] = {
            "part": "snippet",
            "q": query,
            "maxResults": max_results,
            "safeSearch": safe_search,
            "order": "relevance",
        }
        if video_only:
            params["type"] = "video"

        try:
            payload = await self._rate_limiter.enqueue(partial(self._fetch_search, params))
        except RateLimitExceededError as e:
            logger.error(f'YouTube quota exceeded while searching "{query}": {e.message}')
            return None
        except ExternalServiceError as e:
            logger.warning(f'YouTube search failed for "{artist} - {track_name}": {e.message}')
            return None
        except httpx.HTTPError as e:
            logger.warning(
                f'YouTube request error for "{artist} - {track_name}": '
                f"{type(e).__name__}: {e}"
            )
            return None

        match = parse_search_item(payload)
        if match is None:
            logger.info(f'No YouTube video found for "{query}"')
        else:
            logger.info(f'Found YouTube video "{match.title}" by {match.channel_title}')
        return match

    def get_quota_status(self) -> QuotaStatus:
        """Current YouTube quota usage (units used today)."""
        return self._rate_limiter.get_status()

    async def __aenter__(self) -> "YouTubeClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
