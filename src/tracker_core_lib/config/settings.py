"""Tracker Settings

Environment-driven configuration for the record store client and the
device identity store.

Environment Variables:
    TRACKER_STORE_URL: Base URL of the hosted record store (default: "http://localhost:54321")
    TRACKER_STORE_KEY: Public (anon) API key sent with every request
    TRACKER_REQUEST_TIMEOUT: Request timeout in seconds (default: 30)
    TRACKER_PAGE_SIZE: Rows per table page (default: 50)
    TRACKER_STORAGE_KEY: Device storage key for the identity blob
        (default: "immigration_timeline_user")
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_STORE_URL = "http://localhost:54321"
DEFAULT_STORAGE_KEY = "immigration_timeline_user"


class TrackerSettings:
    """Resolved tracker configuration.

    Explicit arguments win over environment variables, which win over defaults.

    Example:
        ```python
        settings = TrackerSettings()
        client = TimelineServiceClient(
            base_url=settings.store_url, api_key=settings.store_key
        )
        ```
    """

    def __init__(
        self,
        store_url: Optional[str] = None,
        store_key: Optional[str] = None,
        request_timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        storage_key: Optional[str] = None,
    ):
        self.store_url = (store_url or os.getenv("TRACKER_STORE_URL", DEFAULT_STORE_URL)).rstrip("/")
        self.store_key = store_key or os.getenv("TRACKER_STORE_KEY", "")
        self.storage_key = storage_key or os.getenv("TRACKER_STORAGE_KEY", DEFAULT_STORAGE_KEY)

        self.request_timeout = (
            request_timeout
            if request_timeout is not None
            else self._env_number("TRACKER_REQUEST_TIMEOUT", 30.0, float)
        )
        self.page_size = (
            page_size if page_size is not None else self._env_number("TRACKER_PAGE_SIZE", 50, int)
        )
        if self.page_size < 1:
            logger.warning(f"Page size must be positive, got {self.page_size}; using 50")
            self.page_size = 50

        if not self.store_key:
            logger.warning("TRACKER_STORE_KEY is not set; record store requests will be anonymous")

        logger.info(
            f"TrackerSettings initialized: store_url={self.store_url}, "
            f"timeout={self.request_timeout}s, page_size={self.page_size}"
        )

    @staticmethod
    def _env_number(name: str, default, cast):
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            return cast(raw)
        except ValueError:
            logger.warning(f"Invalid value in {name}: {raw}, using {default}")
            return default


# Singleton instance for global access
_settings_instance: Optional[TrackerSettings] = None


def get_settings() -> TrackerSettings:
    """Get or create the global TrackerSettings instance."""
    global _settings_instance

    if _settings_instance is None:
        _settings_instance = TrackerSettings()

    return _settings_instance


def reset_settings():
    """Reset the global TrackerSettings instance.

    Used for testing or reconfiguration.
    """
    global _settings_instance
    _settings_instance = None
    logger.warning("TrackerSettings instance reset")
