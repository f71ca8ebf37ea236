from abc import ABC, abstractmethod
from typing import BinaryIO

from upload_core.storage.models import StoredObject


class BaseStorageBackend(ABC):
    """Contract for all storage backends.

    Implementations own whatever locking their medium needs; callers never
    synchronize around backend calls.
    """

    @abstractmethod
    def store(self, source: BinaryIO, key: str) -> StoredObject:
        """Write the whole stream under ``key``.

        The write is atomic from the caller's point of view: on failure
        nothing is visible under ``key``.

        Raises:
            StorageWriteError: if the bytes cannot be committed.
            UnsafeKeyError: if ``key`` could escape the storage root.
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete ``key``. Returns False if it did not exist."""

    @abstractmethod
    def resolve_url(self, key: str) -> str:
        """Return the public URL for ``key`` without touching storage."""

    @abstractmethod
    def copy(self, from_key: str, to_key: str) -> bool:
        """Copy an object. Returns False, changing nothing, if the source is missing."""

    @abstractmethod
    def move(self, from_key: str, to_key: str) -> bool:
        """Move an object. Returns False, changing nothing, if the source is missing."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if an object is stored under ``key``."""

    @abstractmethod
    def open(self, key: str) -> BinaryIO:
        """Open a stored object for reading.

        Raises:
            FileNotFoundError: if nothing is stored under ``key``.
        """

    @abstractmethod
    def size(self, key: str) -> int | None:
        """Return the stored byte size, or None if the key is missing."""

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """Return all stored keys under ``prefix``, sorted."""
