"""Device storage backends.

A DeviceStorage is the key/value space that survives reloads for a single
device, with the same shape as browser local storage: string keys, string
values, get/set/remove.

Backends:
- InMemoryDeviceStorage: process-local dict, for tests and single-user tools
- UnavailableDeviceStorage: no storage at all (non-interactive rendering,
  unknown device); every access raises StorageUnavailableError
- RedisDeviceStorage: server-side storage keyed by device id
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from redis import Redis
from redis.exceptions import RedisError

from tracker_core_lib.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class DeviceStorage(ABC):
    """Abstract base class for device key/value storage."""

    available: bool = True

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Stored value for `key`, or None"""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class InMemoryDeviceStorage(DeviceStorage):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class UnavailableDeviceStorage(DeviceStorage):
    """Storage for environments that have none."""

    available = False

    def get_item(self, key: str) -> Optional[str]:
        raise StorageUnavailableError("Device storage is not available")

    def set_item(self, key: str, value: str) -> None:
        raise StorageUnavailableError("Device storage is not available")

    def remove_item(self, key: str) -> None:
        raise StorageUnavailableError("Device storage is not available")


class RedisDeviceStorage(DeviceStorage):
    """Device storage kept in Redis under `device:{device_id}:{key}`.

    Redis failures surface as StorageUnavailableError so callers see one
    error type regardless of backend.
    """

    def __init__(self, client: Redis, device_id: str, ttl_seconds: Optional[int] = None):
        if not device_id:
            raise ValueError("device_id is required for RedisDeviceStorage")
        self.client = client
        self.device_id = device_id
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"device:{self.device_id}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(self._key(key))
        except RedisError as e:
            raise StorageUnavailableError(f"Redis read failed: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        try:
            self.client.set(self._key(key), value, ex=self.ttl_seconds)
        except RedisError as e:
            raise StorageUnavailableError(f"Redis write failed: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except RedisError as e:
            raise StorageUnavailableError(f"Redis delete failed: {e}") from e
