"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Hey future me, every provider group reads its OWN env prefix! YOUTUBE_API_KEY lands in
# YouTubeSettings.api_key, DISCOGS_API_TOKEN in DiscogsSettings.api_token. A missing key is
# NOT an error here - the clients check it at call time and degrade to "no result".
class YouTubeSettings(BaseSettings):
    """YouTube Data API v3 configuration."""

    model_config = SettingsConfigDict(
        env_prefix="YOUTUBE_", env_file=".env", extra="ignore"
    )

    api_key: str | None = None
    base_url: str = "https://www.googleapis.com/youtube/v3"
    timeout_seconds: float = 15.0

    # Provider allows 10,000 units/day; we stop at 9,000 to keep a buffer.
    # One search.list call costs 100 units, so ~90 searches per day.
    max_requests_per_second: int = Field(default=10, ge=1)
    daily_quota: int = Field(default=9000, ge=0)
    search_quota_cost: int = Field(default=100, ge=1)
    request_delay_seconds: float = Field(default=0.1, ge=0.0)


class DiscogsSettings(BaseSettings):
    """Discogs API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DISCOGS_", env_file=".env", extra="ignore"
    )

    api_token: str | None = None
    base_url: str = "https://api.discogs.com"
    # Discogs rejects requests without a User-Agent that identifies the application.
    user_agent: str = "TrackEnhancer/0.1 +https://github.com/trackenhancer"
    timeout_seconds: float = 15.0

    # Authenticated limit is 60/minute; 55 leaves room for clock drift.
    max_requests_per_minute: int = Field(default=55, ge=1)
    request_delay_seconds: float = Field(default=0.2, ge=0.0)
    search_candidates: int = Field(default=5, ge=1, le=100)


class EnhancementSettings(BaseSettings):
    """Batch enhancement behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="ENHANCEMENT_", env_file=".env", extra="ignore"
    )

    quota_warning_percent: float = Field(default=80.0, ge=0.0, le=100.0)
    discography_max_pages: int = Field(default=5, ge=1)


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_json_format: bool = False


class Settings(BaseSettings):
    """Root settings object grouping all configuration sections."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "trackenhancer"
    youtube: YouTubeSettings = Field(default_factory=YouTubeSettings)
    discogs: DiscogsSettings = Field(default_factory=DiscogsSettings)
    enhancement: EnhancementSettings = Field(default_factory=EnhancementSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


# Cached so every module sees the same settings instance. Tests that tweak env vars
# must call get_settings.cache_clear() afterwards.
@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
