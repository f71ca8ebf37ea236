class CoordinatorError(Exception):
    """Base exception for coordinator-level errors."""


class BatchCancelledError(CoordinatorError):
    """Raised when a batch is cancelled before any file was scheduled."""
