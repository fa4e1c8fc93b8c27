"""Immigration Timeline Tracker Core Library

Shared models, record store client, filter/sort/paginate engines and the
device-local ownership model for the community timeline tracker.
"""

__version__ = "0.1.0"

# Export shared models first (no dependencies)
from tracker_core_lib.models import (
    TimelineRecord, Comment, LocalIdentity, ClaimResult,
    CompletionStatus, FilterState, SortConfig, SortDirection, Page,
)

# Pure view logic
from tracker_core_lib.core.timelines import (
    filter_timelines,
    sort_timelines,
    paginate,
    TimelineViewState,
)

# Device identity
from tracker_core_lib.identity import (
    LocalIdentityStore,
    InMemoryDeviceStorage,
    UnavailableDeviceStorage,
    TimelineOwnership,
    can_edit_timeline,
)

# Configuration
from tracker_core_lib.config import (
    TrackerSettings,
    get_settings,
    reset_settings,
)


# Lazy import for clients: they pull in httpx and the ownership rules,
# so import them last
def __getattr__(name):
    """Lazy import for TimelineServiceClient."""
    if name == "TimelineServiceClient":
        from tracker_core_lib.clients import TimelineServiceClient
        return TimelineServiceClient
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    # Models
    "TimelineRecord", "Comment", "LocalIdentity", "ClaimResult",
    "CompletionStatus", "FilterState", "SortConfig", "SortDirection", "Page",
    # View logic
    "filter_timelines", "sort_timelines", "paginate", "TimelineViewState",
    # Identity
    "LocalIdentityStore", "InMemoryDeviceStorage", "UnavailableDeviceStorage",
    "TimelineOwnership", "can_edit_timeline",
    # Clients (lazy loaded)
    "TimelineServiceClient",
    # Configuration
    "TrackerSettings", "get_settings", "reset_settings",
]
