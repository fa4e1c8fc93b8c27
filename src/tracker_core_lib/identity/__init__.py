"""Device identity and ownership for the tracker.

Identity is device-local and unauthenticated. Ownership checks fail closed
whenever device storage is unavailable.
"""

from tracker_core_lib.identity.storage import (
    DeviceStorage,
    InMemoryDeviceStorage,
    UnavailableDeviceStorage,
    RedisDeviceStorage,
)
from tracker_core_lib.identity.store import LocalIdentityStore
from tracker_core_lib.identity.ownership import (
    ClaimState,
    TimelineOwnership,
    can_edit_timeline,
    ensure_claimable,
)
from tracker_core_lib.identity.request_context import (
    DeviceContext,
    get_device_context,
    identity_store_for_request,
)

__all__ = [
    "DeviceStorage",
    "InMemoryDeviceStorage",
    "UnavailableDeviceStorage",
    "RedisDeviceStorage",
    "LocalIdentityStore",
    "ClaimState",
    "TimelineOwnership",
    "can_edit_timeline",
    "ensure_claimable",
    "DeviceContext",
    "get_device_context",
    "identity_store_for_request",
]
