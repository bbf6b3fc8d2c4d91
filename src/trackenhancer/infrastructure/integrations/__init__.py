"""HTTP clients for external providers."""

from trackenhancer.infrastructure.integrations.discogs_client import DiscogsClient
from trackenhancer.infrastructure.integrations.youtube_client import YouTubeClient

__all__ = ["DiscogsClient", "YouTubeClient"]
