"""Comment validation and one-level threading.

The record store returns a flat, creation-ordered list of comments. Threading
happens here: top-level comments get their replies attached by
`parent_comment_id`. Replies pointing at a missing comment, or at another
reply, have no top-level parent to attach to and drop out of the tree.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from tracker_core_lib.exceptions import CommentValidationError
from tracker_core_lib.models import Comment, MAX_COMMENT_LENGTH, parse_calendar_date

logger = logging.getLogger(__name__)


def validate_comment(email: Optional[str], comment_text: Optional[str]) -> str:
    """Validate a comment before it is posted.

    Args:
        email: Commenter email
        comment_text: Raw text from the form

    Returns:
        The trimmed comment text to store

    Raises:
        CommentValidationError: With the human-readable reason
    """
    if not email or "@" not in email:
        raise CommentValidationError("Valid email is required")

    text = (comment_text or "").strip()
    if not text:
        raise CommentValidationError("Comment cannot be empty")
    if len(text) > MAX_COMMENT_LENGTH:
        raise CommentValidationError(f"Comment must be less than {MAX_COMMENT_LENGTH} characters")

    return text


def thread_comments(comments: Iterable[Comment]) -> List[Comment]:
    """Group a flat comment list into top-level comments with their replies.

    Input order is preserved within each level. Soft-deleted comments are
    skipped even if the caller forgot to filter them.
    """
    visible = [c for c in comments if not c.is_deleted]
    top_level = [c for c in visible if not c.is_reply]
    replies = [c for c in visible if c.is_reply]

    threaded = []
    for comment in top_level:
        children = [r for r in replies if r.parent_comment_id == comment.id]
        threaded.append(comment.model_copy(update={"replies": children}))

    orphaned = len(replies) - sum(len(c.replies) for c in threaded)
    if orphaned:
        logger.debug(f"Dropped {orphaned} replies without a top-level parent")

    return threaded


def count_unread_comments(
    comments: Iterable[Comment], last_viewed: Optional[datetime]
) -> int:
    """Count comments (replies included) created after `last_viewed`.

    Everything counts as unread when the thread was never viewed.
    """
    total = 0
    for comment in comments:
        for item in [comment, *comment.replies]:
            if last_viewed is None:
                total += 1
                continue
            created = parse_calendar_date(item.created_at)
            if created is not None and created > last_viewed:
                total += 1
    return total
