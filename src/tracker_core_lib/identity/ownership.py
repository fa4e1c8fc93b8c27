"""Ownership model - who may present edit affordances for a timeline.

This is a low-assurance trust model, not a security boundary:
- claiming attaches an email to an unclaimed timeline immediately, with no
  confirmation link
- identity is whatever the device storage says, not an account

Claim lifecycle:

    UNCLAIMED --claim(email)--> CLAIMED (terminal)

The transition is allowed only while the timeline has no email, and only if
that email is not already the verified email of another user's timeline.
Concurrent claims are not coordinated; the record store's last write wins.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from tracker_core_lib.core.timelines.filtering import get_field
from tracker_core_lib.exceptions import ClaimRejectedError, NotAuthorizedError
from tracker_core_lib.identity.store import LocalIdentityStore
from tracker_core_lib.models import ClaimResult, Comment, TimelineRecord

logger = logging.getLogger(__name__)


class ClaimState(str, Enum):
    UNCLAIMED = "unclaimed"
    CLAIMED = "claimed"

    @classmethod
    def of(cls, record: Any) -> "ClaimState":
        return cls.CLAIMED if get_field(record, "email") else cls.UNCLAIMED


def ensure_claimable(
    record: Any,
    email: str,
    records_with_email: Iterable[Any] = (),
) -> None:
    """Guard for the UNCLAIMED -> CLAIMED transition.

    Args:
        record: Timeline being claimed
        email: Requesting email
        records_with_email: Timelines whose verified email equals `email`

    Raises:
        ClaimRejectedError: If the claim must not proceed
    """
    if not email or "@" not in email:
        raise ClaimRejectedError("Valid email is required")

    if ClaimState.of(record) == ClaimState.CLAIMED:
        raise ClaimRejectedError("This timeline has already been claimed")

    username = get_field(record, "username")
    for other in records_with_email:
        if get_field(other, "username") != username:
            raise ClaimRejectedError("This email is already in use by another timeline.")


def can_edit_timeline(record: Any, store: LocalIdentityStore) -> bool:
    """True iff the device email is the record's verified email, or the device
    has claimed the record's id. Always False when storage is unavailable.
    """
    identity = store.get_identity()
    if identity is None:
        return False

    verified_email = get_field(record, "email") if get_field(record, "email_verified") else None
    if identity.email and verified_email and verified_email == identity.email:
        return True

    return get_field(record, "id") in identity.claimed_timeline_ids


class TimelineOwnership:
    """Device-side ownership flows: keep the identity store in step with the
    record store after claims, submissions and updates.

    Usage:
        ownership = TimelineOwnership(client, LocalIdentityStore(storage))
        result = await ownership.claim(42, "me@example.com")
        ownership.can_edit(record)  # True
    """

    def __init__(self, client, store: LocalIdentityStore):
        self.client = client
        self.store = store

    def can_edit(self, record: Any) -> bool:
        return can_edit_timeline(record, self.store)

    async def claim(self, timeline_id: int, email: str) -> ClaimResult:
        result = await self.client.claim_timeline(timeline_id, email)
        self.store.save_identity(email, timeline_id, result.username)
        logger.info(f"Device claimed timeline {timeline_id}")
        return result

    async def submit(self, timeline_data: Dict[str, Any]) -> TimelineRecord:
        """Create a timeline and remember it as this device's own."""
        timeline = await self.client.create_timeline(timeline_data)
        if timeline.email:
            self.store.save_identity(timeline.email, timeline.id, timeline.username)
        return timeline

    async def update(self, timeline_id: int, updates: Dict[str, Any]) -> str:
        """Update a timeline using the device's stored email.

        Raises:
            NotAuthorizedError: If the device has no stored email, or the
                record store row does not belong to it
        """
        email = self.store.get_email()
        if not email:
            raise NotAuthorizedError("Not authorized to edit this timeline")

        message = await self.client.update_timeline(timeline_id, email, updates)
        self.store.save_identity(email, timeline_id, None)
        return message

    async def post_comment(
        self,
        timeline_id: int,
        comment_text: str,
        parent_comment_id: Optional[int] = None,
        email: Optional[str] = None,
    ) -> Comment:
        """Post as the device's stored email unless one is given."""
        email = email or self.store.get_email()
        return await self.client.post_comment(
            timeline_id, email, comment_text, parent_comment_id=parent_comment_id
        )
