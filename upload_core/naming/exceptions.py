class NameCollisionError(Exception):
    """Raised when no free storage key can be found for a file."""
