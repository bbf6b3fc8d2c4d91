"""Application services."""

from trackenhancer.application.services.discography_service import (
    DiscographyService,
    to_release_record,
)
from trackenhancer.application.services.track_enhancement_service import (
    EnhancementOptions,
    TrackEnhancementService,
    format_tracks_for_storage,
    get_enhancement_stats,
    summarize,
)

__all__ = [
    "DiscographyService",
    "EnhancementOptions",
    "TrackEnhancementService",
    "format_tracks_for_storage",
    "get_enhancement_stats",
    "summarize",
    "to_release_record",
]
