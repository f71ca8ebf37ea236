from pathlib import Path

from upload_core.config.settings import Settings
from upload_core.storage.base import BaseStorageBackend
from upload_core.storage.exceptions import UnsupportedStorageBackendError
from upload_core.storage.local_adapter import LocalFilesystemStorage
from upload_core.storage.memory_adapter import InMemoryStorage


class StorageBackendFactory:
    """Creates the correct storage backend based on settings."""

    BACKENDS: tuple[str, ...] = ("local", "memory")

    @classmethod
    def create(cls, settings: Settings) -> BaseStorageBackend:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalFilesystemStorage(
                root=Path(settings.storage_local_root),
                public_base_url=settings.storage_public_base_url,
            )
        if backend == "memory":
            return InMemoryStorage(public_base_url=settings.storage_public_base_url)
        raise UnsupportedStorageBackendError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
