"""Configuration management for skiaboot."""

from skiaboot.core.config.loader import ConfigLoader
from skiaboot.core.config.settings import (
    ArtifactSettings,
    BuildSettings,
    LoggingSettings,
    Settings,
    get_settings,
)

__all__ = [
    "ConfigLoader",
    "ArtifactSettings",
    "BuildSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
