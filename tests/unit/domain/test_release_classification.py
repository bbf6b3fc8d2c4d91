"""Tests for discography release classification heuristics."""

import pytest

from trackenhancer.domain.value_objects.provider_types import ReleaseKind
from trackenhancer.domain.value_objects.release_classification import (
    detect_release_kind,
    extract_formats,
    has_allowed_format,
    is_excluded_release,
    is_remix_single_title,
)


class TestIsExcludedRelease:
    """Test the default release filter."""

    @pytest.mark.parametrize(
        "title",
        [
            "The Very Best of Bonobo",
            "Greatest Hits",
            "Best-Of 2001-2010",
            "Late Night Tales Compilation",
            "Live in Tokyo (Bootleg)",
            "Unofficial Release",
            "Kerala (Ross From Friends Remix)",
            "Cirrus / Ten Tigers",
            "Cirrus b/w Ten Tigers",
        ],
    )
    def test_excluded_titles(self, title: str) -> None:
        assert is_excluded_release(title, ["Vinyl", "12\""]) is True

    @pytest.mark.parametrize(
        "title",
        [
            "Migration",
            "The North Borders Remixes",
            "Days To Come",
        ],
    )
    def test_kept_titles(self, title: str) -> None:
        assert is_excluded_release(title, ["CD", "Album"]) is False

    def test_format_allow_list(self) -> None:
        """A non-empty format list needs at least one allowed marker."""
        assert is_excluded_release("Migration", ["Cassette"]) is True
        assert is_excluded_release("Migration", ["File", "MP3"]) is True
        assert is_excluded_release("Migration", ["Cassette", "Album"]) is False

    def test_empty_format_list_passes(self) -> None:
        assert is_excluded_release("Migration", []) is False

    def test_format_match_is_substring_and_case_insensitive(self) -> None:
        assert has_allowed_format(["VINYL"]) is True
        assert has_allowed_format(['2xLP, Album']) is True
        assert has_allowed_format(["Maxi-Single"]) is True

    def test_known_imprecision_drops_legit_album_titles(self) -> None:
        """Title heuristics are plain substrings; this album is dropped on purpose."""
        assert is_excluded_release("Best Of Both Worlds", ["LP"]) is True


class TestIsRemixSingleTitle:
    def test_remix_single(self) -> None:
        assert is_remix_single_title("Kerala (Remix)") is True

    def test_remix_album(self) -> None:
        assert is_remix_single_title("The Remixes") is False


class TestDetectReleaseKind:
    """Test master vs release detection."""

    def test_main_release_means_master(self) -> None:
        assert detect_release_kind({"id": 1, "main_release": 99}) is ReleaseKind.MASTER

    def test_type_master(self) -> None:
        assert detect_release_kind({"id": 1, "type": "master"}) is ReleaseKind.MASTER

    def test_masters_resource_url(self) -> None:
        raw = {"id": 1, "resource_url": "https://api.discogs.com/masters/1"}
        assert detect_release_kind(raw) is ReleaseKind.MASTER

    def test_everything_else_is_release(self) -> None:
        raw = {"id": 1, "type": "release", "resource_url": "https://api.discogs.com/releases/1"}
        assert detect_release_kind(raw) is ReleaseKind.RELEASE


class TestExtractFormats:
    """Test format extraction from the different payload shapes."""

    def test_detail_shape(self) -> None:
        raw = {"formats": [{"name": "Vinyl", "descriptions": ["LP", "Album"]}]}
        assert extract_formats(raw) == ["Vinyl", "LP", "Album"]

    def test_listing_comma_string(self) -> None:
        assert extract_formats({"format": "CD, Album"}) == ["CD", "Album"]

    def test_search_list_shape(self) -> None:
        assert extract_formats({"format": ["Vinyl", "12\""]}) == ["Vinyl", "12\""]

    def test_missing(self) -> None:
        assert extract_formats({}) == []
