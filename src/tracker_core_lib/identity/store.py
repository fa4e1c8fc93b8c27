"""Local identity store.

Persists the device's identity as one JSON blob under a namespaced key:

    {"email": ..., "username": ..., "claimedTimelineIds": [...]}

plus one `comments_last_viewed_<timeline_id>` key per timeline holding an
ISO-8601 timestamp.

Fail closed: when storage is unavailable or unreadable, every read returns
the empty/unauthenticated answer and every write is a no-op. Nothing in
this module raises to the caller.
"""

import logging
from datetime import datetime
from typing import List, Optional

from tracker_core_lib.config.settings import DEFAULT_STORAGE_KEY
from tracker_core_lib.exceptions import StorageUnavailableError
from tracker_core_lib.identity.storage import DeviceStorage, UnavailableDeviceStorage
from tracker_core_lib.models import LocalIdentity, parse_utc_timestamp, utc_timestamp

logger = logging.getLogger(__name__)

COMMENTS_VIEWED_PREFIX = "comments_last_viewed_"


class LocalIdentityStore:
    """Get/set/clear access to the device identity.

    Usage:
        store = LocalIdentityStore(InMemoryDeviceStorage())
        store.save_identity("me@example.com", 42, "maple_leaf")
        store.has_claimed(42)  # True
    """

    def __init__(self, storage: Optional[DeviceStorage] = None, storage_key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage or UnavailableDeviceStorage()
        self.storage_key = storage_key

    @property
    def available(self) -> bool:
        return self.storage.available

    def get_identity(self) -> Optional[LocalIdentity]:
        """Stored identity, or None if absent, unreadable or unavailable."""
        if not self.available:
            return None

        try:
            data = self.storage.get_item(self.storage_key)
            if not data:
                return None
            return LocalIdentity.model_validate_json(data)
        except (StorageUnavailableError, ValueError) as e:
            logger.error(f"Error reading device identity: {e}")
            return None

    def save_identity(
        self,
        email: Optional[str],
        timeline_id: Optional[int],
        username: Optional[str],
    ) -> Optional[LocalIdentity]:
        """Merge email/username and append the claimed id if new.

        Returns:
            The saved identity, or None when nothing could be written
        """
        if not self.available:
            return None

        existing = self.get_identity() or LocalIdentity()
        updated = existing.with_claim(timeline_id, email=email, username=username)

        try:
            self.storage.set_item(self.storage_key, updated.to_storage_json())
        except StorageUnavailableError as e:
            logger.error(f"Error saving device identity: {e}")
            return None

        return updated

    def has_claimed(self, timeline_id: int) -> bool:
        identity = self.get_identity()
        return identity is not None and timeline_id in identity.claimed_timeline_ids

    def get_email(self) -> Optional[str]:
        identity = self.get_identity()
        return identity.email if identity else None

    def get_claimed_ids(self) -> List[int]:
        identity = self.get_identity()
        return list(identity.claimed_timeline_ids) if identity else []

    def clear(self) -> None:
        """Forget the device identity (explicit reset/logout)."""
        if not self.available:
            return

        try:
            self.storage.remove_item(self.storage_key)
        except StorageUnavailableError as e:
            logger.error(f"Error clearing device identity: {e}")

    def mark_comments_viewed(self, timeline_id: int) -> None:
        if not self.available:
            return

        try:
            self.storage.set_item(f"{COMMENTS_VIEWED_PREFIX}{timeline_id}", utc_timestamp())
        except StorageUnavailableError as e:
            logger.error(f"Error marking comments as viewed: {e}")

    def get_comments_last_viewed(self, timeline_id: int) -> Optional[datetime]:
        if not self.available:
            return None

        try:
            timestamp = self.storage.get_item(f"{COMMENTS_VIEWED_PREFIX}{timeline_id}")
            return parse_utc_timestamp(timestamp) if timestamp else None
        except (StorageUnavailableError, ValueError) as e:
            logger.error(f"Error getting last viewed time: {e}")
            return None
