import hashlib
import io
import threading
from typing import BinaryIO
from urllib.parse import quote

from upload_core.storage.base import BaseStorageBackend
from upload_core.storage.exceptions import StorageWriteError
from upload_core.storage.keys import ensure_safe_key
from upload_core.storage.models import StoredObject


class InMemoryStorage(BaseStorageBackend):
    """Process-local backend keeping objects in a dict."""

    def __init__(self, public_base_url: str = "memory://objects") -> None:
        self._public_base_url = public_base_url.rstrip("/")
        self._objects: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def store(self, source: BinaryIO, key: str) -> StoredObject:
        ensure_safe_key(key)
        try:
            data = source.read()
        except OSError as exc:
            raise StorageWriteError(f"Failed to store '{key}': {exc}") from exc
        with self._lock:
            self._objects[key] = data
        return StoredObject(
            key=key,
            final_path=f"memory:{key}",
            public_url=self.resolve_url(key),
            size=len(data),
            checksum_sha256=hashlib.sha256(data).hexdigest(),
        )

    def delete(self, key: str) -> bool:
        ensure_safe_key(key)
        with self._lock:
            return self._objects.pop(key, None) is not None

    def resolve_url(self, key: str) -> str:
        ensure_safe_key(key)
        return f"{self._public_base_url}/{quote(key)}"

    def copy(self, from_key: str, to_key: str) -> bool:
        ensure_safe_key(from_key)
        ensure_safe_key(to_key)
        with self._lock:
            if from_key not in self._objects:
                return False
            self._objects[to_key] = self._objects[from_key]
        return True

    def move(self, from_key: str, to_key: str) -> bool:
        ensure_safe_key(from_key)
        ensure_safe_key(to_key)
        with self._lock:
            if from_key not in self._objects:
                return False
            self._objects[to_key] = self._objects.pop(from_key)
        return True

    def exists(self, key: str) -> bool:
        ensure_safe_key(key)
        with self._lock:
            return key in self._objects

    def open(self, key: str) -> BinaryIO:
        ensure_safe_key(key)
        with self._lock:
            data = self._objects.get(key)
        if data is None:
            raise FileNotFoundError(f"File not found: {key}")
        return io.BytesIO(data)

    def size(self, key: str) -> int | None:
        with self._lock:
            data = self._objects.get(key)
        return None if data is None else len(data)

    def list_keys(self, prefix: str = "") -> list[str]:
        prefix = prefix.strip("/")
        with self._lock:
            keys = list(self._objects)
        if not prefix:
            return sorted(keys)
        return sorted(k for k in keys if k == prefix or k.startswith(f"{prefix}/"))
