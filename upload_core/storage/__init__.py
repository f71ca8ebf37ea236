from upload_core.storage.base import BaseStorageBackend
from upload_core.storage.exceptions import (
    StorageError,
    StorageWriteError,
    UnsafeKeyError,
    UnsupportedStorageBackendError,
)
from upload_core.storage.factory import StorageBackendFactory
from upload_core.storage.local_adapter import LocalFilesystemStorage
from upload_core.storage.memory_adapter import InMemoryStorage
from upload_core.storage.models import StorageKey, StoredObject

__all__ = [
    "BaseStorageBackend",
    "InMemoryStorage",
    "LocalFilesystemStorage",
    "StorageBackendFactory",
    "StorageError",
    "StorageKey",
    "StorageWriteError",
    "StoredObject",
    "UnsafeKeyError",
    "UnsupportedStorageBackendError",
]
