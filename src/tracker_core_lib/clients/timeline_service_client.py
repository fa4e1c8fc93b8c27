"""HTTP client for the timeline and comment tables."""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from tracker_core_lib.clients.base import BaseServiceClient
from tracker_core_lib.config import get_settings
from tracker_core_lib.core.comments import thread_comments, validate_comment
from tracker_core_lib.exceptions import (
    NotAuthorizedError,
    RecordNotFoundError,
    RecordStoreError,
    ValidationFailure,
)
from tracker_core_lib.identity.ownership import ensure_claimable
from tracker_core_lib.models import (
    EDITABLE_FIELDS,
    ClaimResult,
    Comment,
    DataSource,
    TimelineRecord,
    utc_timestamp,
)
from tracker_core_lib.utils import service_startup_retry

logger = logging.getLogger(__name__)

TIMELINES_TABLE = "timelines"
COMMENTS_TABLE = "timeline_comments"
RETURN_REPRESENTATION = "return=representation"


class TimelineServiceClient(BaseServiceClient):
    """Async client for the hosted record store.

    Reads and writes timelines and comments, enforcing the claim and
    ownership rules before any write. Failures raise RecordStoreError and are
    never retried automatically.

    Usage:
        client = TimelineServiceClient(base_url="https://project.example.co", api_key="anon")
        timelines = await client.get_timelines()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport=None,
    ):
        super().__init__(base_url=base_url, api_key=api_key, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings=None, transport=None) -> "TimelineServiceClient":
        """Build a client from TrackerSettings (global settings by default)."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.store_url,
            api_key=settings.store_key,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @staticmethod
    def _parse(model, row: Mapping[str, Any]):
        """Validate one store row, reporting malformed rows as a store failure."""
        try:
            return model(**row)
        except ValidationError as e:
            logger.error(f"Malformed {model.__name__} row from record store: {e}")
            raise RecordStoreError(
                f"Record store returned a malformed {model.__name__} row"
            ) from e

    # ------------------------------------------------------------------
    # Timelines
    # ------------------------------------------------------------------

    async def get_timelines(self) -> List[TimelineRecord]:
        """Fetch all timelines, newest first."""
        rows = await self._request(
            "GET",
            TIMELINES_TABLE,
            params={"select": "*", "order": "created_at.desc"},
        )
        return [self._parse(TimelineRecord, row) for row in rows or []]

    async def get_timeline(self, timeline_id: int) -> TimelineRecord:
        """Fetch one timeline.

        Raises:
            RecordNotFoundError: If no timeline has this id
        """
        rows = await self._request(
            "GET",
            TIMELINES_TABLE,
            params={"select": "*", "id": f"eq.{timeline_id}", "limit": 1},
        )
        if not rows:
            logger.error(f"Timeline {timeline_id} not found")
            raise RecordNotFoundError(f"Timeline {timeline_id} not found")
        return self._parse(TimelineRecord, rows[0])

    async def _get_timelines_by_verified_email(self, email: str) -> List[TimelineRecord]:
        rows = await self._request(
            "GET",
            TIMELINES_TABLE,
            params={"select": "*", "email": f"eq.{email}", "email_verified": "is.true"},
        )
        return [self._parse(TimelineRecord, row) for row in rows or []]

    async def create_timeline(self, timeline_data: Mapping[str, Any]) -> TimelineRecord:
        """Insert a user-submitted timeline; its email is verified on creation.

        Raises:
            ValidationFailure: If no valid email is provided
        """
        email = timeline_data.get("email")
        if not email or "@" not in email:
            raise ValidationFailure("Valid email is required")

        now = utc_timestamp()
        payload = {key: value for key, value in timeline_data.items() if key != "id"}
        payload.update(
            {
                "email_verified": True,
                "data_source": DataSource.USER_SUBMISSION.value,
                "created_at": now,
                "updated_at": now,
            }
        )

        rows = await self._request("POST", TIMELINES_TABLE, json=payload, prefer=RETURN_REPRESENTATION)
        timeline = self._parse(TimelineRecord, rows[0])
        logger.info(f"Created timeline {timeline.id} for {timeline.username}")
        return timeline

    async def update_timeline(
        self, timeline_id: int, email: str, updates: Mapping[str, Any]
    ) -> str:
        """Update milestone/category fields of a timeline owned by `email`.

        Raises:
            NotAuthorizedError: If `email` is not the timeline's verified email
        """
        timeline = await self.get_timeline(timeline_id)
        if not email or timeline.verified_email != email:
            logger.warning(f"Rejected update of timeline {timeline_id}: not the owner")
            raise NotAuthorizedError("Not authorized to edit this timeline")

        payload = {key: value for key, value in updates.items() if key in EDITABLE_FIELDS}
        ignored = set(updates) - set(payload)
        if ignored:
            logger.debug(f"Ignoring non-editable fields in update: {sorted(ignored)}")
        payload["last_updated_by_user"] = utc_timestamp()

        await self._request(
            "PATCH",
            TIMELINES_TABLE,
            params={"id": f"eq.{timeline_id}"},
            json=payload,
        )
        logger.info(f"Updated timeline {timeline_id}")
        return "Timeline updated successfully"

    async def claim_timeline(self, timeline_id: int, email: str) -> ClaimResult:
        """Attach `email` to an unclaimed timeline, immediately and unverified.

        Raises:
            RecordNotFoundError: If the timeline does not exist
            ClaimRejectedError: If already claimed, or the email belongs to
                another user's timeline
        """
        timeline = await self.get_timeline(timeline_id)
        owned = await self._get_timelines_by_verified_email(email) if email else []
        ensure_claimable(timeline, email, owned)

        await self._request(
            "PATCH",
            TIMELINES_TABLE,
            params={"id": f"eq.{timeline_id}"},
            json={
                "email": email,
                "email_verified": True,
                "verification_token": None,
                "verification_token_expires": None,
            },
        )
        logger.info(f"Timeline {timeline_id} claimed by {timeline.username}")

        return ClaimResult(
            message=f"Timeline claimed successfully for {timeline.username}!",
            timeline_id=timeline_id,
            username=timeline.username,
        )

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def get_timeline_comments(self, timeline_id: int) -> List[Comment]:
        """Fetch non-deleted comments for a timeline, threaded one level deep."""
        rows = await self._request(
            "GET",
            COMMENTS_TABLE,
            params={
                "select": "*",
                "timeline_id": f"eq.{timeline_id}",
                "is_deleted": "is.false",
                "order": "created_at.asc",
            },
        )
        return thread_comments(self._parse(Comment, row) for row in rows or [])

    async def post_comment(
        self,
        timeline_id: int,
        email: Optional[str],
        comment_text: str,
        parent_comment_id: Optional[int] = None,
    ) -> Comment:
        """Post a comment. Validation happens before any request is sent.

        The commenter's display name is the username of the timeline they own,
        else the local part of their email. `is_timeline_owner` is fixed now
        and not recomputed later.

        Raises:
            CommentValidationError: If the email or text is invalid
        """
        text = validate_comment(email, comment_text)

        owned = await self._get_timelines_by_verified_email(email)
        commenter_username = owned[0].username if owned else email.split("@")[0]

        timeline = await self.get_timeline(timeline_id)
        is_owner = timeline.verified_email == email

        rows = await self._request(
            "POST",
            COMMENTS_TABLE,
            json={
                "timeline_id": timeline_id,
                "commenter_email": email,
                "commenter_username": commenter_username,
                "comment_text": text,
                "parent_comment_id": parent_comment_id,
                "is_timeline_owner": is_owner,
            },
            prefer=RETURN_REPRESENTATION,
        )
        return self._parse(Comment, rows[0])

    async def _get_replies(self, comment_id: int) -> List[Comment]:
        rows = await self._request(
            "GET",
            COMMENTS_TABLE,
            params={
                "select": "*",
                "parent_comment_id": f"eq.{comment_id}",
                "is_deleted": "is.false",
                "order": "created_at.asc",
            },
        )
        return [self._parse(Comment, row) for row in rows or []]

    async def get_user_comments(self, email: str) -> List[Comment]:
        """Fetch a user's comments, newest first, with their timeline and replies."""
        rows = await self._request(
            "GET",
            COMMENTS_TABLE,
            params={
                "select": "*,timelines!timeline_comments_timeline_id_fkey(*)",
                "commenter_email": f"eq.{email}",
                "is_deleted": "is.false",
                "order": "created_at.desc",
            },
        )
        if not rows:
            return []

        comments = [self._comment_with_timeline(row) for row in rows]
        replies = await asyncio.gather(*(self._get_replies(c.id) for c in comments))

        return [
            comment.model_copy(update={"replies": children, "reply_count": len(children)})
            for comment, children in zip(comments, replies)
        ]

    def _comment_with_timeline(self, row: Dict[str, Any]) -> Comment:
        data = dict(row)
        embedded = data.pop("timelines", None)
        if embedded:
            data["timeline"] = self._parse(TimelineRecord, embedded)
        return self._parse(Comment, data)

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    @service_startup_retry
    async def verify_connection(self) -> None:
        """Probe the record store, retrying with backoff while it comes up."""
        await self._request("GET", TIMELINES_TABLE, params={"select": "id", "limit": 1})
        logger.info("Record store connection verified")
