class ValidationError(Exception):
    """Base exception for validator failures that are not policy violations."""


class FileReadError(ValidationError):
    """Raised when a candidate file's byte stream cannot be read."""
