"""Configuration module for trackenhancer."""

from .settings import (
    DiscogsSettings,
    EnhancementSettings,
    ObservabilitySettings,
    Settings,
    YouTubeSettings,
    get_settings,
)

__all__ = [
    "DiscogsSettings",
    "EnhancementSettings",
    "ObservabilitySettings",
    "Settings",
    "YouTubeSettings",
    "get_settings",
]
