class StorageError(Exception):
    """Base exception for all storage-backend errors."""


class StorageWriteError(StorageError):
    """Raised when bytes cannot be written durably under a key."""


class UnsafeKeyError(StorageError, ValueError):
    """Raised when a key could escape the storage root."""


class UnsupportedStorageBackendError(StorageError):
    """Raised when settings name a storage backend that does not exist."""
