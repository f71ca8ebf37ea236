import hashlib
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

from upload_core.logging.logger import Log
from upload_core.storage.base import BaseStorageBackend
from upload_core.storage.exceptions import StorageError, StorageWriteError, UnsafeKeyError
from upload_core.storage.keys import ensure_safe_key
from upload_core.storage.models import StoredObject

_TEMP_PREFIX = ".upload-"
_TEMP_SUFFIX = ".tmp"


class LocalFilesystemStorage(BaseStorageBackend):
    """Stores objects as files under a root directory.

    Writes go to a hidden temporary file in the target directory and are
    committed with ``os.replace``, so readers never see a partial file.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(self, root: Path, public_base_url: str = "/files") -> None:
        self._root = root.resolve()
        self._public_base_url = public_base_url.rstrip("/")
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def store(self, source: BinaryIO, key: str) -> StoredObject:
        target = self._path_for(key)
        digest = hashlib.sha256()
        size = 0
        tmp_path: Path | None = None
        committed = False
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=target.parent, prefix=_TEMP_PREFIX, suffix=_TEMP_SUFFIX, delete=False
            ) as tmp:
                tmp_path = Path(tmp.name)
                while chunk := source.read(self.CHUNK_SIZE):
                    tmp.write(chunk)
                    digest.update(chunk)
                    size += len(chunk)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, target)
            committed = True
        except OSError as exc:
            raise StorageWriteError(f"Failed to store '{key}': {exc}") from exc
        finally:
            if not committed and tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

        Log.debug(f"Stored {size} bytes at {target}")
        return StoredObject(
            key=key,
            final_path=str(target),
            public_url=self.resolve_url(key),
            size=size,
            checksum_sha256=digest.hexdigest(),
        )

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as exc:
                raise StorageError(f"Failed to delete '{key}': {exc}") from exc
        Log.debug(f"Deleted {path}")
        return True

    def resolve_url(self, key: str) -> str:
        ensure_safe_key(key)
        return f"{self._public_base_url}/{quote(key)}"

    def copy(self, from_key: str, to_key: str) -> bool:
        src = self._path_for(from_key)
        dst = self._path_for(to_key)
        with self._lock:
            if not src.is_file():
                return False
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                with src.open("rb") as source:
                    self._write_atomically(source, dst)
            except OSError as exc:
                raise StorageError(f"Failed to copy '{from_key}' to '{to_key}': {exc}") from exc
        return True

    def move(self, from_key: str, to_key: str) -> bool:
        src = self._path_for(from_key)
        dst = self._path_for(to_key)
        with self._lock:
            if not src.is_file():
                return False
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                os.replace(src, dst)
            except OSError as exc:
                raise StorageError(f"Failed to move '{from_key}' to '{to_key}': {exc}") from exc
        return True

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def open(self, key: str) -> BinaryIO:
        path = self._path_for(key)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {key}")
        return path.open("rb")

    def size(self, key: str) -> int | None:
        try:
            return self._path_for(key).stat().st_size
        except FileNotFoundError:
            return None

    def list_keys(self, prefix: str = "") -> list[str]:
        base = self._path_for(prefix.strip("/")) if prefix.strip("/") else self._root
        if not base.is_dir():
            return []
        return sorted(
            path.relative_to(self._root).as_posix()
            for path in base.rglob("*")
            if path.is_file() and not path.name.startswith(_TEMP_PREFIX)
        )

    def _write_atomically(self, source: BinaryIO, target: Path) -> None:
        with tempfile.NamedTemporaryFile(
            dir=target.parent, prefix=_TEMP_PREFIX, suffix=_TEMP_SUFFIX, delete=False
        ) as tmp:
            tmp_path = Path(tmp.name)
            try:
                shutil.copyfileobj(source, tmp, self.CHUNK_SIZE)
            except OSError:
                tmp.close()
                tmp_path.unlink(missing_ok=True)
                raise
        os.replace(tmp_path, target)

    def _path_for(self, key: str) -> Path:
        ensure_safe_key(key)
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise UnsafeKeyError(f"Storage key escapes the storage root: {key!r}")
        return path
