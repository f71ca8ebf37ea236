"""Housekeeping over stored uploads: usage totals and orphan cleanup."""

from collections.abc import Iterable

from upload_core.logging.logger import Log
from upload_core.storage.base import BaseStorageBackend


def storage_usage(backend: BaseStorageBackend, keys: Iterable[str]) -> int:
    """Total bytes stored under ``keys``; missing keys count as zero."""
    total = 0
    for key in keys:
        size = backend.size(key)
        if size is not None:
            total += size
    return total


def cleanup_orphans(
    backend: BaseStorageBackend,
    prefix: str,
    referenced_keys: Iterable[str],
) -> list[str]:
    """Delete stored objects under ``prefix`` that nothing references any more.

    Returns the keys that were actually deleted.
    """
    referenced = set(referenced_keys)
    deleted: list[str] = []
    for key in backend.list_keys(prefix):
        if key in referenced:
            continue
        if backend.delete(key):
            deleted.append(key)
    if deleted:
        Log.info(f"Removed {len(deleted)} orphaned uploads under '{prefix}'")
    return deleted
