"""YouTube URL helpers used when storing and embedding matched videos."""

from urllib.parse import parse_qs, urlencode, urlparse

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
EMBED_URL = "https://www.youtube.com/embed/{video_id}"

_YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com")


def build_watch_url(video_id: str) -> str:
    return WATCH_URL.format(video_id=video_id)


def build_embed_url(
    video_id: str,
    *,
    autoplay: bool = False,
    controls: bool = True,
    modest_branding: bool = True,
    related_videos: bool = False,
) -> str:
    """Build an embed URL, only emitting parameters that differ from YouTube's defaults."""
    params: dict[str, str] = {}
    if autoplay:
        params["autoplay"] = "1"
    if not controls:
        params["controls"] = "0"
    if modest_branding:
        params["modestbranding"] = "1"
    if not related_videos:
        params["rel"] = "0"

    url = EMBED_URL.format(video_id=video_id)
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


def extract_video_id(url: str | None) -> str | None:
    """Pull the video ID out of watch, short-link and embed URLs.

    Returns None for anything that isn't a recognizable YouTube video URL.
    """
    if not url:
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    host = (parsed.hostname or "").lower()
    if host == "youtu.be":
        video_id = parsed.path.lstrip("/").split("/")[0]
        return video_id or None

    if host in _YOUTUBE_HOSTS:
        if parsed.path.startswith("/embed/") or parsed.path.startswith("/shorts/"):
            video_id = parsed.path.split("/")[2]
            return video_id or None
        values = parse_qs(parsed.query).get("v")
        if values and values[0]:
            return values[0]

    return None
