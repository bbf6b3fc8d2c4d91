"""Tests for track enhancement, quota and discography endpoints.

The provider clients are replaced with mocks through dependency overrides, so no
request ever leaves the test process.
"""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from trackenhancer.api.dependencies import (
    get_discography_service,
    get_track_enhancement_service,
)
from trackenhancer.application.services import (
    DiscographyService,
    TrackEnhancementService,
)
from trackenhancer.config.settings import DiscogsSettings, Settings, YouTubeSettings
from trackenhancer.domain.dtos import (
    DiscogsArtistMatch,
    DiscographyResult,
    QuotaStatus,
    ReleaseRecord,
    YouTubeMatch,
)
from trackenhancer.domain.exceptions import (
    ExternalServiceError,
    RateLimitExceededError,
    ValidationError,
)
from trackenhancer.domain.value_objects.provider_types import ReleaseKind
from trackenhancer.main import create_app


def quota(provider: str, used: int, max_: int, remaining: int, window: str) -> QuotaStatus:
    return QuotaStatus(
        provider=provider,
        used=used,
        max=max_,
        percent_used=used / max_ * 100,
        queue_length=0,
        remaining_requests=remaining,
        window=window,
    )


BONOBO = DiscogsArtistMatch(
    artist_id=24941,
    name="Bonobo",
    discogs_url="https://www.discogs.com/artist/24941",
    aliases=("Barakas",),
)


@pytest.fixture
def youtube() -> MagicMock:
    client = MagicMock()
    client.search_video = AsyncMock(
        return_value=YouTubeMatch(
            video_id="abc",
            title="Bonobo - Kerala",
            channel_title="Bonobo",
            thumbnail_url="https://i.ytimg.com/vi/abc/mqdefault.jpg",
            video_url="https://www.youtube.com/watch?v=abc",
            published_at="2016-11-23T17:00:00Z",
        )
    )
    client.get_quota_status.return_value = quota("youtube", 100, 9000, 89, "day")
    return client


@pytest.fixture
def discogs() -> MagicMock:
    client = MagicMock()
    client.search_artist = AsyncMock(return_value=BONOBO)
    client.get_quota_status.return_value = quota("discogs", 2, 55, 53, "minute")
    return client


@pytest.fixture
def discography_service() -> MagicMock:
    service = MagicMock(spec=DiscographyService)
    service.get_artist_discography_for_profile = AsyncMock()
    return service


@pytest.fixture
def app(youtube: MagicMock, discogs: MagicMock, discography_service: MagicMock) -> FastAPI:
    app = create_app(
        Settings(
            youtube=YouTubeSettings(api_key=None),
            discogs=DiscogsSettings(api_token=None),
        )
    )
    app.dependency_overrides[get_track_enhancement_service] = lambda: TrackEnhancementService(
        youtube, discogs
    )
    app.dependency_overrides[get_discography_service] = lambda: discography_service
    return app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


class TestEnhanceTracks:
    """Test POST /api/tracks/enhance."""

    def test_enhances_tracks(self, client: TestClient, discogs: MagicMock) -> None:
        response = client.post(
            "/api/tracks/enhance",
            json={
                "tracks": [
                    {"id": "t1", "artist": "Bonobo", "track_name": "Kerala"},
                    {
                        "id": "t2",
                        "artist": "Bonobo",
                        "track_name": "Cirrus",
                        "youtube_url": "https://www.youtube.com/watch?v=old",
                    },
                ]
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Enhanced 2 tracks: 1 YouTube videos, 2 Discogs artists found"
        first, second = data["tracks"]
        assert first["id"] == "t1"
        assert first["youtube_status"] == "success"
        assert first["youtube_url"] == "https://www.youtube.com/watch?v=abc"
        assert first["discogs_match"]["aliases"] == ["Barakas"]
        assert second["youtube_status"] == "skipped"
        assert second["youtube_url"] == "https://www.youtube.com/watch?v=old"
        assert data["summary"]["youtube_skipped"] == 1
        assert data["quota_usage"]["youtube"]["percent_used"] == 1.11
        assert data["quota_usage"]["discogs"]["window"] == "minute"
        assert data["warnings"] == []
        discogs.search_artist.assert_awaited_once_with("Bonobo")

    def test_options_are_passed_through(self, client: TestClient, discogs: MagicMock) -> None:
        response = client.post(
            "/api/tracks/enhance",
            json={
                "tracks": [{"artist": "Bonobo", "track_name": "Kerala"}],
                "options": {"enable_discogs": False},
            },
        )

        assert response.status_code == 200
        assert response.json()["tracks"][0]["discogs_status"] == "skipped"
        discogs.search_artist.assert_not_awaited()

    def test_quota_warnings_are_returned(self, client: TestClient, youtube: MagicMock) -> None:
        youtube.get_quota_status.return_value = quota("youtube", 8000, 9000, 10, "day")

        response = client.post(
            "/api/tracks/enhance",
            json={"tracks": [{"artist": "Bonobo", "track_name": "Kerala"}]},
        )

        assert response.status_code == 200
        assert response.json()["warnings"] == ["youtube quota at 88.9% (8000/9000 per day)"]

    def test_refuses_when_quota_exhausted(self, client: TestClient, youtube: MagicMock) -> None:
        youtube.get_quota_status.return_value = quota("youtube", 9000, 9000, 0, "day")

        response = client.post(
            "/api/tracks/enhance",
            json={"tracks": [{"artist": "Bonobo", "track_name": "Kerala"}]},
        )

        assert response.status_code == 429
        data = response.json()
        assert data["success"] is False
        assert "midnight UTC" in data["message"]
        assert data["quota_status"]["youtube"]["available"] is False
        assert data["quota_status"]["discogs"]["available"] is True
        youtube.search_video.assert_not_awaited()

    def test_exhausted_provider_ignored_when_disabled(
        self, client: TestClient, youtube: MagicMock
    ) -> None:
        youtube.get_quota_status.return_value = quota("youtube", 9000, 9000, 0, "day")

        response = client.post(
            "/api/tracks/enhance",
            json={
                "tracks": [{"artist": "Bonobo", "track_name": "Kerala"}],
                "options": {"enable_youtube": False},
            },
        )

        assert response.status_code == 200

    @pytest.mark.parametrize(
        "body",
        [
            {"tracks": []},
            {"tracks": [{"artist": "", "track_name": "Kerala"}]},
            {"tracks": [{"track_name": "Kerala"}]},
            {},
        ],
    )
    def test_invalid_request(self, client: TestClient, body: dict) -> None:
        response = client.post("/api/tracks/enhance", json=body)

        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)

    def test_blank_artist_fails_only_that_track(
        self, client: TestClient, youtube: MagicMock, discogs: MagicMock
    ) -> None:
        response = client.post(
            "/api/tracks/enhance",
            json={
                "tracks": [
                    {"id": "blank", "artist": "   ", "track_name": "Kerala"},
                    {"id": "ok", "artist": "Bonobo", "track_name": "Kerala"},
                ]
            },
        )

        assert response.status_code == 200
        blank, ok = response.json()["tracks"]
        assert (blank["youtube_status"], blank["discogs_status"]) == ("failed", "failed")
        assert (ok["youtube_status"], ok["discogs_status"]) == ("success", "success")
        youtube.search_video.assert_awaited_once_with("Bonobo", "Kerala")
        discogs.search_artist.assert_awaited_once_with("Bonobo")

    def test_correlation_id_is_echoed(self, client: TestClient) -> None:
        response = client.post(
            "/api/tracks/enhance",
            json={"tracks": [{"artist": "Bonobo", "track_name": "Kerala"}]},
            headers={"X-Correlation-ID": "batch-1"},
        )

        assert response.headers["X-Correlation-ID"] == "batch-1"


class TestQuota:
    """Test GET /api/quota endpoints."""

    def test_overview(self, client: TestClient) -> None:
        response = client.get("/api/quota")

        assert response.status_code == 200
        data = response.json()
        assert data["quotas"]["youtube"]["used"] == 100
        assert data["quotas"]["discogs"]["max"] == 55
        assert data["availability"]["youtube"]["message"] == "89 YouTube searches remaining today"
        assert data["availability"]["discogs"]["remaining"] == 53

    @pytest.mark.parametrize("provider", ["youtube", "YouTube", "discogs"])
    def test_single_provider(self, client: TestClient, provider: str) -> None:
        response = client.get(f"/api/quota/{provider}")

        assert response.status_code == 200
        assert response.json()["provider"] == provider.lower()

    def test_unknown_provider(self, client: TestClient) -> None:
        response = client.get("/api/quota/spotify")

        assert response.status_code == 404
        assert response.json()["detail"] == "Unknown provider: spotify"


class TestDiscographyProfile:
    """Test POST /api/discography/profile."""

    def test_returns_profile(
        self, client: TestClient, discography_service: MagicMock
    ) -> None:
        discography_service.get_artist_discography_for_profile.return_value = DiscographyResult(
            success=True,
            artist_name="Bonobo",
            artist_info=BONOBO,
            releases=[
                ReleaseRecord(
                    source_release_id=1111,
                    title="Migration",
                    year=2017,
                    release_kind=ReleaseKind.MASTER,
                    label="Ninja Tune",
                    catalog_number="ZEN240",
                    cover_image_url=None,
                    source_url="https://www.discogs.com/master/1111",
                    formats=("CD", "Album"),
                )
            ],
        )

        response = client.post(
            "/api/discography/profile",
            json={"artist_name": "Bonobo", "max_releases": 5, "discogs_id": 24941},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["artist_info"]["artist_id"] == 24941
        assert data["releases"][0]["release_kind"] == "master"
        assert data["releases"][0]["year"] == 2017
        discography_service.get_artist_discography_for_profile.assert_awaited_once_with(
            "Bonobo",
            max_releases=5,
            include_details=True,
            discogs_url=None,
            discogs_id=24941,
        )

    def test_not_found_is_not_an_http_error(
        self, client: TestClient, discography_service: MagicMock
    ) -> None:
        discography_service.get_artist_discography_for_profile.return_value = DiscographyResult(
            success=False,
            artist_name="Nobody",
            error='Artist "Nobody" not found on Discogs',
        )

        response = client.post("/api/discography/profile", json={"artist_name": "Nobody"})

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["releases"] == []

    @pytest.mark.parametrize(
        "body",
        [{"artist_name": ""}, {"artist_name": "Bonobo", "max_releases": 0}, {"artist_name": "Bonobo", "discogs_id": 0}],
    )
    def test_invalid_request(self, client: TestClient, body: dict) -> None:
        response = client.post("/api/discography/profile", json=body)
        assert response.status_code == 422

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (RateLimitExceededError("slow down", provider="discogs", status_code=429), 429),
            (ExternalServiceError("boom", provider="discogs", status_code=500), 502),
        ],
    )
    def test_provider_errors_are_mapped(
        self,
        client: TestClient,
        discography_service: MagicMock,
        error: ExternalServiceError,
        status_code: int,
    ) -> None:
        discography_service.get_artist_discography_for_profile.side_effect = error

        response = client.post("/api/discography/profile", json={"artist_name": "Bonobo"})

        assert response.status_code == status_code
        assert response.json()["provider"] == "discogs"

    def test_domain_validation_error_is_422(
        self, client: TestClient, discography_service: MagicMock
    ) -> None:
        discography_service.get_artist_discography_for_profile.side_effect = ValidationError(
            "max_releases must be positive"
        )

        response = client.post("/api/discography/profile", json={"artist_name": "Bonobo"})

        assert response.status_code == 422
        assert response.json() == {"detail": "max_releases must be positive"}


class TestDefaultWiring:
    """Without overrides, unconfigured clients still serve quota snapshots."""

    def test_quota_without_credentials(self) -> None:
        app = create_app(
            Settings(
                youtube=YouTubeSettings(api_key=None),
                discogs=DiscogsSettings(api_token=None),
            )
        )

        with TestClient(app) as client:
            response = client.get("/api/quota")

        assert response.status_code == 200
        data = response.json()
        assert data["quotas"]["youtube"]["window"] == "day"
        assert data["quotas"]["discogs"]["window"] == "minute"
        assert data["availability"]["youtube"]["available"] is True
