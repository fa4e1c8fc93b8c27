"""Local identity model - who the current device claims to be.

Purely advisory: nothing here is authenticated. The identity lives in device
storage, is lost when that storage is cleared, and is never synced.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LocalIdentity(BaseModel):
    """Serialized as `{email, username, claimedTimelineIds[]}`."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    username: Optional[str] = None
    claimed_timeline_ids: List[int] = Field(default_factory=list, alias="claimedTimelineIds")

    @field_validator("email", "username", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return v or None

    @field_validator("claimed_timeline_ids", mode="before")
    @classmethod
    def dedupe_ids(cls, v):
        """Keep first occurrence order, drop duplicates"""
        if not v:
            return []
        if not isinstance(v, (list, tuple)):
            return v
        seen = []
        for item in v:
            if item not in seen:
                seen.append(item)
        return seen

    def with_claim(
        self,
        timeline_id: Optional[int],
        email: Optional[str] = None,
        username: Optional[str] = None,
    ) -> "LocalIdentity":
        """Return a copy that remembers the email/username and claimed id."""
        claimed = list(self.claimed_timeline_ids)
        if timeline_id and timeline_id not in claimed:
            claimed.append(timeline_id)
        return LocalIdentity(
            email=email or self.email,
            username=username or self.username,
            claimed_timeline_ids=claimed,
        )

    def to_storage_json(self) -> str:
        return self.model_dump_json(by_alias=True)
