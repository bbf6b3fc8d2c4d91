"""Tests for YouTube URL helpers."""

import pytest

from trackenhancer.domain.value_objects.youtube_urls import (
    build_embed_url,
    build_watch_url,
    extract_video_id,
)


class TestBuildUrls:
    def test_watch_url(self) -> None:
        assert build_watch_url("abc123") == "https://www.youtube.com/watch?v=abc123"

    def test_embed_url_defaults(self) -> None:
        assert (
            build_embed_url("abc123")
            == "https://www.youtube.com/embed/abc123?modestbranding=1&rel=0"
        )

    def test_embed_url_autoplay_without_controls(self) -> None:
        url = build_embed_url(
            "abc123", autoplay=True, controls=False, modest_branding=False, related_videos=True
        )
        assert url == "https://www.youtube.com/embed/abc123?autoplay=1&controls=0"


class TestExtractVideoId:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=abc123",
            "https://youtube.com/watch?v=abc123&t=42",
            "https://m.youtube.com/watch?v=abc123",
            "https://youtu.be/abc123",
            "https://www.youtube.com/embed/abc123",
            "https://www.youtube.com/shorts/abc123",
        ],
    )
    def test_recognized_urls(self, url: str) -> None:
        assert extract_video_id(url) == "abc123"

    @pytest.mark.parametrize(
        "url",
        [None, "", "https://vimeo.com/12345", "https://www.youtube.com/channel/UC123"],
    )
    def test_unrecognized(self, url: str | None) -> None:
        assert extract_video_id(url) is None
