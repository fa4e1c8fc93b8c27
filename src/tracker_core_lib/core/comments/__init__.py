"""Comment threading package"""

from .threads import (
    validate_comment,
    thread_comments,
    count_unread_comments,
)

__all__ = [
    "validate_comment",
    "thread_comments",
    "count_unread_comments",
]
