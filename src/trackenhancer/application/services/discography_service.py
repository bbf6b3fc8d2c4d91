# Hey future me - this service builds the "proper studio output" view of a Discogs artist!
#
# Used for artist profiles: who is this artist, and what did they actually release?
# The raw /artists/{id}/releases list is full of noise (compilations, bootlegs,
# remix promos, appearances), so every entry goes through a ReleaseFilter before it
# counts towards max_results.
#
# Every Discogs call goes through the Discogs rate limiter (55/min). With
# include_details=True that's one extra call PER examined listing entry, fetched
# before the filter runs (rejected entries cost a call too), so keep max_results
# small for profile generation.
"""Discography Service - filtered Discogs discographies for artist profiles."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from trackenhancer.domain.dtos import DiscographyResult, ReleaseRecord
from trackenhancer.domain.value_objects.provider_types import ReleaseKind
from trackenhancer.domain.value_objects.release_classification import (
    detect_release_kind,
    extract_formats,
    is_excluded_release,
)
from trackenhancer.infrastructure.integrations.discogs_client import (
    build_release_url,
    extract_artist_id,
)

if TYPE_CHECKING:
    from trackenhancer.domain.dtos import DiscogsArtistMatch
    from trackenhancer.domain.ports import IDiscogsClient
    from trackenhancer.domain.value_objects.release_classification import (
        ReleaseFilter,
    )

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100


def _first_label(raw: Mapping[str, Any]) -> tuple[str, str]:
    """(label name, catalog number) from either the detail or the listing shape.

    Detail payloads carry labels=[{"name", "catno"}], listings carry flat
    "label" / "catno" strings. The first label with a non-empty name wins.
    """
    for entry in raw.get("labels") or []:
        name = str(entry.get("name") or "").strip()
        if name:
            return name, str(entry.get("catno") or "").strip()
    return str(raw.get("label") or "").strip(), str(raw.get("catno") or "").strip()


def _parse_year(value: Any) -> int | None:
    # Discogs uses 0 for "unknown year" on some releases.
    try:
        year = int(value)
    except (TypeError, ValueError):
        return None
    return year or None


def _cover_image(raw: Mapping[str, Any]) -> str | None:
    images = raw.get("images") or []
    if images and images[0].get("uri"):
        return str(images[0]["uri"])
    return raw.get("cover_image") or raw.get("thumb") or None


def to_release_record(raw: Mapping[str, Any]) -> ReleaseRecord:
    """Transform a raw Discogs release (listing or detail) into a ReleaseRecord.

    Args:
        raw: Listing entry, optionally merged with its detail payload

    Returns:
        Normalized release record
    """
    kind = detect_release_kind(raw)
    release_id = int(raw["id"])
    label, catalog_number = _first_label(raw)

    return ReleaseRecord(
        source_release_id=release_id,
        title=str(raw.get("title") or ""),
        year=_parse_year(raw.get("year")),
        release_kind=kind,
        label=label,
        catalog_number=catalog_number,
        cover_image_url=_cover_image(raw),
        source_url=build_release_url(release_id, kind),
        formats=tuple(extract_formats(raw)),
    )


class DiscographyService:
    """Fetch an artist's discography from Discogs and filter it down.

    Hey future me - the filter is PLUGGABLE on purpose. The default title heuristics
    drop legit albums now and then ("Best Of Both Worlds"). Hand in another
    ReleaseFilter instead of patching the paging logic.

    Usage:
        service = DiscographyService(discogs_client)
        releases = await service.get_discography(24941, max_results=10)
    """

    def __init__(
        self,
        discogs_client: IDiscogsClient,
        release_filter: ReleaseFilter = is_excluded_release,
        max_pages: int = 5,
    ) -> None:
        """Initialize discography service.

        Args:
            discogs_client: Discogs client (rate limited)
            release_filter: Returns True for releases that should be dropped
            max_pages: Upper bound on listing pages fetched per discography
        """
        self._discogs = discogs_client
        self._release_filter = release_filter
        self._max_pages = max_pages

    async def get_discography(
        self,
        artist_id: int,
        *,
        max_results: int = 10,
        sort: str = "year",
        sort_order: str = "desc",
        include_details: bool = False,
    ) -> list[ReleaseRecord]:
        """Fetch and filter an artist's releases.

        Pages through the listing (per_page = 3 x max_results, capped at 100) until
        max_results releases were accepted, the listing ends or max_pages is hit.

        Args:
            artist_id: Discogs artist ID
            max_results: Maximum number of accepted releases
            sort: Discogs sort key (year, title, format)
            sort_order: asc or desc
            include_details: Fetch master/release detail for each entry

        Returns:
            Accepted releases in listing order, may be empty
        """
        if max_results <= 0:
            return []

        per_page = min(3 * max_results, MAX_PER_PAGE)
        accepted: list[ReleaseRecord] = []
        examined = 0

        for page in range(1, self._max_pages + 1):
            payload = await self._discogs.get_artist_releases(
                artist_id,
                page=page,
                per_page=per_page,
                sort=sort,
                sort_order=sort_order,
            )
            if not payload:
                break

            entries = payload.get("releases") or []
            for entry in entries:
                if entry.get("id") is None:
                    continue
                examined += 1

                raw = await self._with_details(entry) if include_details else entry
                title = str(raw.get("title") or "")
                if self._release_filter(title, extract_formats(raw)):
                    logger.debug(f'Excluded Discogs release "{title}" ({entry["id"]})')
                    continue

                accepted.append(to_release_record(raw))
                if len(accepted) >= max_results:
                    break

            if len(accepted) >= max_results:
                break

            pagination = payload.get("pagination") or {}
            if not entries or page >= int(pagination.get("pages") or page):
                break

        logger.info(
            f"Discogs discography for artist {artist_id}: "
            f"{len(accepted)} accepted of {examined} examined"
        )
        return accepted

    async def _with_details(self, entry: Mapping[str, Any]) -> Mapping[str, Any]:
        """Merge master/release detail over the listing entry.

        A failed detail fetch is not fatal, the listing entry is used as-is.
        """
        release_id = int(entry["id"])
        if detect_release_kind(entry) is ReleaseKind.MASTER:
            detail = await self._discogs.get_master(release_id)
        else:
            detail = await self._discogs.get_release(release_id)

        if not detail:
            logger.debug(f"No detail for Discogs release {release_id}, using listing entry")
            return entry

        merged = {**entry, **detail}
        # Masters' detail payload has no "type" field, keep the kind the listing told us.
        if entry.get("type") and "type" not in detail:
            merged["type"] = entry["type"]
        return merged

    async def get_artist_discography_for_profile(
        self,
        artist_name: str,
        *,
        max_releases: int = 15,
        include_details: bool = True,
        discogs_url: str | None = None,
        discogs_id: int | None = None,
    ) -> DiscographyResult:
        """Resolve an artist and fetch their filtered discography.

        Resolution order: explicit discogs_id, then an ID parsed from discogs_url,
        then a name search. This never raises, every failure ends up in
        DiscographyResult.error.

        Args:
            artist_name: Artist name (used for the search and in the result)
            max_releases: Maximum number of releases to return
            include_details: Fetch a detail payload for every examined entry (before filtering)
            discogs_url: Known Discogs artist URL
            discogs_id: Known Discogs artist ID

        Returns:
            DiscographyResult with success flag, artist info and releases
        """
        try:
            artist = await self._resolve_artist(artist_name, discogs_url, discogs_id)
            if artist is None:
                return DiscographyResult(
                    success=False,
                    artist_name=artist_name,
                    error=f'Artist "{artist_name}" not found on Discogs',
                )

            releases = await self.get_discography(
                artist.artist_id,
                max_results=max_releases,
                include_details=include_details,
            )
            return DiscographyResult(
                success=True,
                artist_name=artist.name or artist_name,
                releases=releases,
                artist_info=artist,
            )
        except Exception as e:
            logger.error(
                f'Discography lookup failed for "{artist_name}": {e}', exc_info=True
            )
            return DiscographyResult(success=False, artist_name=artist_name, error=str(e))

    async def _resolve_artist(
        self,
        artist_name: str,
        discogs_url: str | None,
        discogs_id: int | None,
    ) -> DiscogsArtistMatch | None:
        artist_id = discogs_id or extract_artist_id(discogs_url)
        if artist_id:
            logger.debug(f"Using known Discogs artist ID {artist_id} for {artist_name}")
            return await self._discogs.get_artist_match(artist_id)
        return await self._discogs.search_artist(artist_name)
