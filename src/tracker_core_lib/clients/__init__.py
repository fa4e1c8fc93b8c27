"""Record store clients."""

from tracker_core_lib.clients.base import BaseServiceClient
from tracker_core_lib.clients.timeline_service_client import TimelineServiceClient

__all__ = [
    "BaseServiceClient",
    "TimelineServiceClient",
]
