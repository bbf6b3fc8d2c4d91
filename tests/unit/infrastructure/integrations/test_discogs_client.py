"""Tests for Discogs client implementation."""

from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
from pytest_httpx import HTTPXMock
from pytest_mock import MockerFixture

from trackenhancer.config.settings import DiscogsSettings
from trackenhancer.domain.exceptions import RateLimitExceededError
from trackenhancer.domain.value_objects.provider_types import ReleaseKind
from trackenhancer.infrastructure.integrations.discogs_client import (
    DiscogsClient,
    build_release_url,
    error_from_response,
    extract_artist_id,
)
from trackenhancer.infrastructure.rate_limiter import RateLimiter, RateLimiterConfig

BASE_URL = "https://discogs.test"


def artist_detail(artist_id: int = 2, name: str = "Bonobo") -> dict[str, Any]:
    return {
        "id": artist_id,
        "name": name,
        "realname": "Simon Green",
        "profile": "British musician, producer and DJ.",
        "images": [
            {"uri": "https://img.test/full.jpg", "uri150": "https://img.test/150.jpg"}
        ],
        "aliases": [{"id": 99, "name": "Barakas"}],
    }


@pytest.fixture
def discogs_settings() -> DiscogsSettings:
    """Create Discogs settings for testing."""
    return DiscogsSettings(
        api_token="test-token",
        base_url=BASE_URL,
        user_agent="TrackEnhancerTests/1.0",
        timeout_seconds=5.0,
    )


@pytest.fixture
async def limiter() -> AsyncIterator[RateLimiter]:
    """Fresh Discogs-like limiter per test, no inter-request delay."""
    limiter = RateLimiter(
        config=RateLimiterConfig(
            max_requests_per_window=55, window_seconds=60.0, request_delay_seconds=0
        ),
        name="discogs",
    )
    yield limiter
    await limiter.close()


@pytest.fixture
async def discogs_client(
    discogs_settings: DiscogsSettings, limiter: RateLimiter
) -> AsyncIterator[DiscogsClient]:
    """Create Discogs client for testing."""
    async with DiscogsClient(discogs_settings, rate_limiter=limiter) as client:
        yield client


class TestHelpers:
    """Test URL helpers and error parsing."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.discogs.com/artist/12345-Bonobo", 12345),
            ("https://www.discogs.com/artist/12345", 12345),
            ("https://www.discogs.com/release/555-Migration", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract_artist_id(self, url: str | None, expected: int | None) -> None:
        assert extract_artist_id(url) == expected

    def test_build_release_url(self) -> None:
        assert build_release_url(7, ReleaseKind.MASTER) == "https://www.discogs.com/master/7"
        assert build_release_url(8, ReleaseKind.RELEASE) == "https://www.discogs.com/release/8"

    def test_429_is_rate_limit_error(self) -> None:
        error = error_from_response(
            httpx.Response(429, json={"message": "You are making requests too quickly."})
        )
        assert isinstance(error, RateLimitExceededError)
        assert error.provider == "discogs"
        assert "too quickly" in error.message

    def test_404_message(self) -> None:
        error = error_from_response(httpx.Response(404, json={"message": "Release not found."}))
        assert not isinstance(error, RateLimitExceededError)
        assert error.status_code == 404
        assert "Release not found." in error.message


class TestSearchArtist:
    """Test two-phase artist resolution (search + detail)."""

    async def test_picks_best_candidate_and_fetches_details(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            json={
                "results": [
                    {"id": 1, "type": "artist", "title": "Bonobo Orchestra", "thumb": "a.jpg"},
                    {"id": 2, "type": "artist", "title": "Bonobo", "thumb": "b.jpg"},
                    {"id": 3, "type": "label", "title": "Bonobo"},
                ]
            }
        )
        httpx_mock.add_response(json=artist_detail(2))

        match = await discogs_client.search_artist("Bonobo")

        assert match is not None
        assert match.artist_id == 2
        assert match.name == "Bonobo"
        assert match.real_name == "Simon Green"
        assert match.profile_text == "British musician, producer and DJ."
        assert match.image_url == "https://img.test/150.jpg"
        assert match.aliases == ("Barakas",)
        assert match.discogs_url == "https://www.discogs.com/artist/2"

        search_request, detail_request = httpx_mock.get_requests()
        assert search_request.url.path == "/database/search"
        assert search_request.url.params["q"] == "Bonobo"
        assert search_request.url.params["type"] == "artist"
        assert search_request.url.params["per_page"] == "5"
        assert search_request.headers["Authorization"] == "Discogs token=test-token"
        assert search_request.headers["User-Agent"] == "TrackEnhancerTests/1.0"
        assert detail_request.url.path == "/artists/2"

    async def test_quotes_stripped_and_max_candidates(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(json={"results": []})

        assert await discogs_client.search_artist("“Four Tet”", max_candidates=10) is None

        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.params["q"] == "Four Tet"
        assert request.url.params["per_page"] == "10"

    async def test_only_non_artist_results(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            json={"results": [{"id": 3, "type": "label", "title": "Ninja Tune"}]}
        )

        assert await discogs_client.search_artist("Ninja Tune") is None

    async def test_falls_back_to_search_thumb_without_images(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            json={"results": [{"id": 5, "type": "artist", "title": "Burial", "thumb": "t.jpg"}]}
        )
        detail = artist_detail(5, "Burial")
        detail["images"] = []
        del detail["aliases"]
        httpx_mock.add_response(json=detail)

        match = await discogs_client.search_artist("Burial")

        assert match is not None
        assert match.image_url == "t.jpg"
        assert match.aliases == ()

    async def test_detail_failure_means_no_match(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        """Never hand out a half-built match."""
        httpx_mock.add_response(
            json={"results": [{"id": 2, "type": "artist", "title": "Bonobo"}]}
        )
        httpx_mock.add_response(status_code=500, json={"message": "boom"})

        assert await discogs_client.search_artist("Bonobo") is None

    async def test_search_error_returns_none(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(status_code=429, json={"message": "slow down"})

        assert await discogs_client.search_artist("Bonobo") is None

    async def test_transport_error_returns_none(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

        assert await discogs_client.search_artist("Bonobo") is None

    async def test_two_calls_through_the_limiter(
        self,
        discogs_client: DiscogsClient,
        limiter: RateLimiter,
        httpx_mock: HTTPXMock,
    ) -> None:
        httpx_mock.add_response(json={"results": [{"id": 2, "type": "artist", "title": "Bonobo"}]})
        httpx_mock.add_response(json=artist_detail(2))

        await discogs_client.search_artist("Bonobo")

        status = discogs_client.get_quota_status()
        assert status.used == 2
        assert status.window == "minute"


class TestDetailEndpoints:
    """Test artist, release and master lookups."""

    async def test_get_artist_match_by_id(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(json=artist_detail(24941))

        match = await discogs_client.get_artist_match(24941)

        assert match is not None
        assert match.artist_id == 24941
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.path == "/artists/24941"

    async def test_detail_fetch_goes_through_limiter(
        self,
        discogs_client: DiscogsClient,
        limiter: RateLimiter,
        mocker: MockerFixture,
    ) -> None:
        enqueue = mocker.spy(limiter, "enqueue")
        fetch = mocker.patch.object(
            discogs_client, "_fetch_json", new=AsyncMock(return_value=artist_detail(2))
        )

        match = await discogs_client.get_artist_match(2)

        assert match is not None
        assert match.image_url == "https://img.test/150.jpg"
        enqueue.assert_called_once()
        fetch.assert_awaited_once_with("/artists/2", None)

    async def test_release_not_found(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(status_code=404, json={"message": "Release not found."})

        assert await discogs_client.get_release(1) is None

    async def test_get_master(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(json={"id": 7, "title": "Migration", "main_release": 8})

        master = await discogs_client.get_master(7)

        assert master is not None
        assert master["main_release"] == 8
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.path == "/masters/7"

    async def test_get_artist_releases_params(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            json={"pagination": {"page": 2, "pages": 3}, "releases": [{"id": 1}]}
        )

        payload = await discogs_client.get_artist_releases(
            24941, page=2, per_page=500, sort="title", sort_order="asc"
        )

        assert payload is not None
        assert payload["releases"] == [{"id": 1}]
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.path == "/artists/24941/releases"
        assert request.url.params["page"] == "2"
        assert request.url.params["per_page"] == "100"
        assert request.url.params["sort"] == "title"
        assert request.url.params["sort_order"] == "asc"

    async def test_get_artist_releases_error(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(status_code=503, text="maintenance")

        assert await discogs_client.get_artist_releases(24941) is None

    async def test_get_artist_genres(
        self, discogs_client: DiscogsClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            json={
                "releases": [
                    {"id": 1, "genres": ["Electronic"], "styles": ["Downtempo", "Trip Hop"]},
                    {"id": 2, "genres": ["Electronic", "Jazz"], "styles": ["Downtempo"]},
                    {"id": 3, "genre": ["Hip Hop"], "style": ["Instrumental", "Abstract"]},
                ]
            }
        )

        genres = await discogs_client.get_artist_genres(24941)

        assert genres == ["Electronic", "Downtempo", "Trip Hop", "Jazz", "Hip Hop"]
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.params["per_page"] == "5"


class TestMissingConfiguration:
    """Test graceful degradation without an API token."""

    async def test_everything_returns_empty_without_requests(
        self, limiter: RateLimiter
    ) -> None:
        client = DiscogsClient(DiscogsSettings(api_token=None, base_url=BASE_URL), rate_limiter=limiter)

        assert client.is_configured is False
        assert await client.search_artist("Bonobo") is None
        assert await client.get_artist_match(1) is None
        assert await client.get_artist_releases(1) is None
        assert await client.get_release(1) is None
        assert await client.get_master(1) is None
        assert await client.get_artist_genres(1) == []
        assert client.get_quota_status().used == 0
        await client.close()
