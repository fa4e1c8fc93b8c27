"""Configuration Module

Environment-driven settings for the tracker core.
"""

from .settings import (
    DEFAULT_STORAGE_KEY,
    TrackerSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "TrackerSettings",
    "get_settings",
    "reset_settings",
]
