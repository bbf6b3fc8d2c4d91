"""Discography classification heuristics for Discogs releases.

Hey future me - an artist's Discogs release list is NOISY: compilations they appear
on, bootlegs, one-track remix promos, two-sided 7" singles. For artist profiles we
only want the proper studio output, so everything goes through is_excluded_release().

KNOWN IMPRECISION: these are plain title substring checks. An album literally called
"Compilation Vol. 1" or "Best Of Both Worlds" gets dropped. That's accepted - don't
"fix" it by guessing intent. If you need better, pass a different ReleaseFilter into
DiscographyService instead of editing the fetch logic.

Rules (any hit excludes the release):
1. Format list is non-empty and contains none of the allowed format markers
2. Title contains a compilation marker (compilation, best of, greatest hits, ...)
3. Title contains a bootleg marker (bootleg, unofficial)
4. Title contains "remix" but not "remixes" (remix single, remix ALBUMS are fine)
5. Title looks like a two-sided single ("A / B" or "A b/w B")
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from trackenhancer.domain.value_objects.provider_types import ReleaseKind

ALLOWED_FORMAT_MARKERS: tuple[str, ...] = (
    "album",
    "lp",
    "vinyl",
    "cd",
    '12"',
    '7"',
    "single",
    "ep",
    "maxi-single",
)

COMPILATION_MARKERS: tuple[str, ...] = (
    "compilation",
    "best of",
    "best-of",
    "greatest hits",
    "the very best",
)

BOOTLEG_MARKERS: tuple[str, ...] = (
    "bootleg",
    "unofficial",
)

TWO_SIDED_MARKERS: tuple[str, ...] = (
    " / ",
    " b/w ",
)

# (title, formats) -> True when the release should be dropped
ReleaseFilter = Callable[[str, Sequence[str]], bool]


def has_allowed_format(formats: Sequence[str]) -> bool:
    """Empty format lists pass, otherwise one entry must contain an allowed marker."""
    if not formats:
        return True
    lowered = [fmt.lower() for fmt in formats if fmt]
    return any(marker in fmt for fmt in lowered for marker in ALLOWED_FORMAT_MARKERS)


def is_compilation_title(title: str) -> bool:
    lowered = title.lower()
    return any(marker in lowered for marker in COMPILATION_MARKERS)


def is_bootleg_title(title: str) -> bool:
    lowered = title.lower()
    return any(marker in lowered for marker in BOOTLEG_MARKERS)


def is_remix_single_title(title: str) -> bool:
    """A "Track (Remix)" title is a remix single, "The Remixes" is a remix album."""
    lowered = title.lower()
    return "remix" in lowered and "remixes" not in lowered


def is_two_sided_single_title(title: str) -> bool:
    lowered = title.lower()
    return any(marker in lowered for marker in TWO_SIDED_MARKERS)


def is_excluded_release(title: str, formats: Sequence[str]) -> bool:
    """Default release filter, see module docstring for the rules.

    Args:
        title: Release title
        formats: Format names and descriptions (e.g. ["Vinyl", "LP", "Album"])

    Returns:
        True if the release should be dropped from the discography
    """
    if not has_allowed_format(formats):
        return True
    return (
        is_compilation_title(title)
        or is_bootleg_title(title)
        or is_remix_single_title(title)
        or is_two_sided_single_title(title)
    )


def detect_release_kind(raw: Mapping[str, Any]) -> ReleaseKind:
    """Masters have a main_release, an explicit master type or a /masters/ URL."""
    if raw.get("main_release") is not None:
        return ReleaseKind.MASTER
    if str(raw.get("type") or "").lower() == ReleaseKind.MASTER.value:
        return ReleaseKind.MASTER
    if "/masters/" in str(raw.get("resource_url") or ""):
        return ReleaseKind.MASTER
    return ReleaseKind.RELEASE


def extract_formats(raw: Mapping[str, Any]) -> list[str]:
    """Collect format names from either payload shape Discogs uses.

    Detail endpoints return formats=[{"name": "Vinyl", "descriptions": ["LP"]}],
    artist release listings return format="Vinyl, LP, Album" and search results
    return format=["Vinyl", "LP"].
    """
    formats: list[str] = []
    detailed = raw.get("formats")
    if isinstance(detailed, list):
        for entry in detailed:
            if isinstance(entry, Mapping):
                if entry.get("name"):
                    formats.append(str(entry["name"]))
                formats.extend(str(d) for d in entry.get("descriptions") or [] if d)
            elif entry:
                formats.append(str(entry))
        return formats

    listed = raw.get("format")
    if isinstance(listed, str):
        return [part.strip() for part in listed.split(",") if part.strip()]
    if isinstance(listed, list):
        return [str(part) for part in listed if part]
    return formats
