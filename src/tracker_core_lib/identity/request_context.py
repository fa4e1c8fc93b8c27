"""Device context extraction for FastAPI services.

When the tracker is served from an API, the "device" is identified by an
opaque id the browser sends with every request, either as the X-Device-ID
header or the `tracker_device_id` cookie. It is not authenticated.

Requests without a device id get an identity store backed by
UnavailableDeviceStorage, so every ownership check answers False.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from redis import Redis

from tracker_core_lib.config import get_settings
from tracker_core_lib.identity.storage import RedisDeviceStorage, UnavailableDeviceStorage
from tracker_core_lib.identity.store import LocalIdentityStore

logger = logging.getLogger(__name__)

DEVICE_ID_HEADER = "X-Device-ID"
DEVICE_ID_COOKIE = "tracker_device_id"


@dataclass
class DeviceContext:
    """Device context extracted from request headers/cookies.

    Attributes:
        device_id: Opaque device id, None when the request carries none
        correlation_id: Optional correlation ID for request tracing
    """

    device_id: Optional[str] = None
    correlation_id: Optional[str] = None

    @property
    def has_device(self) -> bool:
        return bool(self.device_id)


def get_device_context(request: Request) -> DeviceContext:
    """Extract device context from a request.

    Usable as a FastAPI dependency: `ctx: DeviceContext = Depends(get_device_context)`.
    """
    device_id = request.headers.get(DEVICE_ID_HEADER) or request.cookies.get(DEVICE_ID_COOKIE)
    if device_id:
        device_id = device_id.strip() or None

    if not device_id:
        logger.debug("Request has no device id; identity checks will fail closed")

    return DeviceContext(
        device_id=device_id,
        correlation_id=request.headers.get("X-Correlation-ID"),
    )


def identity_store_for_request(
    request: Request,
    redis_client: Optional[Redis],
    ttl_seconds: Optional[int] = None,
) -> LocalIdentityStore:
    """Build the identity store for the requesting device.

    Args:
        request: FastAPI request object
        redis_client: Client for server-side device storage; None disables it
        ttl_seconds: Optional expiry for stored device keys

    Returns:
        Redis-backed store, or an unavailable one when there is no device id
        or no Redis client
    """
    context = get_device_context(request)
    storage_key = get_settings().storage_key

    if not context.has_device or redis_client is None:
        return LocalIdentityStore(UnavailableDeviceStorage(), storage_key=storage_key)

    storage = RedisDeviceStorage(redis_client, context.device_id, ttl_seconds=ttl_seconds)
    return LocalIdentityStore(storage, storage_key=storage_key)
