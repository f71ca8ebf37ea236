import re

from upload_core.storage.exceptions import UnsafeKeyError

_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")


def ensure_safe_key(key: str) -> str:
    """Return ``key`` unchanged if it is a safe relative storage key.

    A safe key is non-empty, relative, uses ``/`` as its only separator and
    has no empty, ``.`` or ``..`` segments.

    Raises:
        UnsafeKeyError: if any rule is broken.
    """
    if not key:
        raise UnsafeKeyError("Storage key must not be empty")
    if "\x00" in key:
        raise UnsafeKeyError(f"Storage key contains a NUL byte: {key!r}")
    if "\\" in key:
        raise UnsafeKeyError(f"Storage key contains a backslash: {key!r}")
    if key.startswith("/") or _DRIVE_LETTER.match(key):
        raise UnsafeKeyError(f"Storage key must be relative: {key!r}")
    for segment in key.split("/"):
        if segment in ("", ".", ".."):
            raise UnsafeKeyError(f"Storage key has an invalid segment: {key!r}")
    return key


def join_key(prefix: str, name: str) -> str:
    return f"{prefix.strip('/')}/{name}" if prefix.strip("/") else name
