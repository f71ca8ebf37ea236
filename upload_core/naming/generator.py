"""Derives storage keys for accepted files."""

import re
import threading
import uuid
from collections.abc import Callable, Iterable, Iterator

from upload_core.naming.exceptions import NameCollisionError
from upload_core.policy.models import NamingStrategy, UploadPolicy
from upload_core.storage.exceptions import UnsafeKeyError
from upload_core.storage.keys import ensure_safe_key, join_key
from upload_core.validation.models import CandidateFile

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.-]+")
_DOT_RUNS = re.compile(r"\.{2,}")
_EXTENSION_CHARS = re.compile(r"[^a-z0-9]")
_RESERVED_NAMES = frozenset(
    {"con", "prn", "aux", "nul"}
    | {f"com{i}" for i in range(1, 10)}
    | {f"lpt{i}" for i in range(1, 10)}
)

MAX_NAME_LENGTH = 255
MAX_EXTENSION_LENGTH = 16


def sanitize_filename(name: str) -> str:
    """Reduce an untrusted original name to a safe single path segment.

    Strips directories, control and reserved characters, dot runs and
    leading dots, and caps the length at MAX_NAME_LENGTH.
    """
    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    base = "".join(ch for ch in base if ch.isprintable())
    base = _UNSAFE_NAME_CHARS.sub("_", base)
    base = _DOT_RUNS.sub(".", base).lstrip(".").strip("_")

    stem, dot, ext = base.rpartition(".")
    if not dot:
        stem, ext = base, ""
    ext = sanitize_extension(ext)
    if not stem:
        stem = "file"
    if stem.lower() in _RESERVED_NAMES:
        stem = f"_{stem}"

    limit = MAX_NAME_LENGTH - (len(ext) + 1 if ext else 0)
    return f"{stem[:limit]}.{ext}" if ext else stem[:limit]


def sanitize_extension(ext: str) -> str:
    return _EXTENSION_CHARS.sub("", ext.lower())[:MAX_EXTENSION_LENGTH]


class NameGenerator:
    """Generates collision-resistant, traversal-safe storage keys.

    ``exists`` is usually the storage backend's ``exists``. Keys handed out
    are also reserved in-process until ``release`` is called, so concurrent
    pipelines in one batch never pick the same preserved name.
    """

    MAX_COLLISION_ATTEMPTS = 1000

    def __init__(
        self,
        exists: Callable[[str], bool] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._exists = exists if exists is not None else (lambda _key: False)
        self._id_factory = id_factory if id_factory is not None else (lambda: uuid.uuid4().hex)
        self._reserved: set[str] = set()
        self._lock = threading.Lock()

    def generate_key(self, file: CandidateFile, policy: UploadPolicy) -> str:
        """Return a fresh storage key for ``file`` under ``policy.upload_root``.

        Raises:
            UnsafeKeyError: if the resulting key would not be a safe relative key.
            NameCollisionError: if every candidate name is taken.
        """
        if policy.naming_strategy is NamingStrategy.PRESERVE:
            names = self._preserved_names(file)
        else:
            names = self._unique_names(file)
        return self._claim(policy.upload_root, names)

    def release(self, key: str) -> None:
        """Forget an in-process reservation once the key is stored or abandoned."""
        with self._lock:
            self._reserved.discard(key)

    def _unique_names(self, file: CandidateFile) -> Iterator[str]:
        ext = sanitize_extension(file.extension)
        for _ in range(self.MAX_COLLISION_ATTEMPTS):
            ident = self._id_factory()
            yield f"{ident}.{ext}" if ext else ident

    def _preserved_names(self, file: CandidateFile) -> Iterator[str]:
        name = sanitize_filename(file.original_name)
        yield name
        stem, dot, ext = name.rpartition(".")
        if not dot:
            stem, ext = name, ""
        for n in range(1, self.MAX_COLLISION_ATTEMPTS):
            suffixed = f"{stem}-{n}"
            yield f"{suffixed}.{ext}" if ext else suffixed
        tail = self._id_factory()[:8]
        yield f"{stem}-{tail}.{ext}" if ext else f"{stem}-{tail}"

    def _claim(self, root: str, names: Iterable[str]) -> str:
        """Reserve the first candidate that is neither reserved nor stored.

        ``exists`` runs outside the lock; the reservation set is checked
        again before claiming.
        """
        for name in names:
            key = _assert_safe(join_key(root, name))
            with self._lock:
                if key in self._reserved:
                    continue
            if self._exists(key):
                continue
            with self._lock:
                if key in self._reserved:
                    continue
                self._reserved.add(key)
                return key
        raise NameCollisionError(f"Could not find a free storage key under '{root}'")


def _assert_safe(key: str) -> str:
    if ".." in key:
        raise UnsafeKeyError(f"Generated key contains '..': {key!r}")
    return ensure_safe_key(key)
