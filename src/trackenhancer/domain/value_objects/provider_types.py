"""Enums shared across the enhancement pipeline.

Usage:
    from trackenhancer.domain.value_objects.provider_types import EnhancementOutcome

    if track.status.youtube is EnhancementOutcome.SUCCESS:
        ...
"""

from enum import Enum


class Provider(str, Enum):
    """External providers the pipeline talks to."""

    YOUTUBE = "youtube"
    DISCOGS = "discogs"

    @classmethod
    def from_string(cls, value: str) -> "Provider | None":
        """Parse a provider name, returning None if unknown."""
        if not value:
            return None
        try:
            return cls(value.lower().strip())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class EnhancementOutcome(str, Enum):
    """Per-provider outcome for one track.

    FAILED covers both "provider answered with nothing usable" and "the call
    blew up" - the caller's remedy is the same either way.
    """

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


class ReleaseKind(str, Enum):
    """Discogs release granularity.

    MASTER is the abstract grouping (an album across all pressings), RELEASE is
    one concrete pressing or edition.
    """

    MASTER = "master"
    RELEASE = "release"

    def __str__(self) -> str:
        return self.value
