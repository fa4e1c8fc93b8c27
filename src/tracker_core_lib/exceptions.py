"""Error taxonomy for the tracker core.

- RecordStoreError: remote call failed (network or query); retryable by the user
- ValidationFailure: operation rejected with a human-readable reason
- StorageUnavailableError: device storage cannot be read or written; the
  identity store absorbs it and degrades to empty/no-op
"""


class TrackerError(Exception):
    """Base class for all tracker errors."""


class RecordStoreError(TrackerError):
    """Remote record store request failed."""


class RecordNotFoundError(RecordStoreError):
    """Requested record does not exist."""


class ValidationFailure(TrackerError):
    """Operation rejected before any state change."""


class CommentValidationError(ValidationFailure):
    pass


class ClaimRejectedError(ValidationFailure):
    pass


class NotAuthorizedError(ValidationFailure):
    pass


class StorageUnavailableError(TrackerError):
    """Device storage is not accessible in this environment."""
