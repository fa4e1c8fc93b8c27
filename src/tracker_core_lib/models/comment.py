"""Comment models - replies attached to a timeline, threaded one level deep."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tracker_core_lib.models.timeline import TimelineRecord


MAX_COMMENT_LENGTH = 2000


class Comment(BaseModel):
    """A comment row from the `timeline_comments` table.

    `is_timeline_owner` is computed once when the comment is posted and is
    never recomputed if the timeline changes owner afterwards.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    timeline_id: int
    commenter_email: str
    commenter_username: str
    comment_text: str = Field(..., max_length=MAX_COMMENT_LENGTH)
    parent_comment_id: Optional[int] = Field(None, description="None for top-level comments")
    is_timeline_owner: bool = False
    is_deleted: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Populated client-side
    replies: List["Comment"] = Field(default_factory=list)
    timeline: Optional[TimelineRecord] = None
    reply_count: Optional[int] = None

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None


Comment.model_rebuild()
