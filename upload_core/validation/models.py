import io
import mimetypes
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import BinaryIO

DEFAULT_MIME_TYPE = "application/octet-stream"


def _basename(name: str) -> str:
    return name.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class CandidateFile:
    """An unpersisted, untrusted file payload awaiting validation.

    ``opener`` returns a fresh binary stream on every call, so the payload
    can be read more than once without being held in memory.
    """

    original_name: str
    declared_mime_type: str
    declared_size: int
    opener: Callable[[], BinaryIO] = field(repr=False, compare=False)

    def open(self) -> BinaryIO:
        return self.opener()

    @property
    def extension(self) -> str:
        """Lower-case final extension without the dot, or "" if there is none."""
        return PurePosixPath(_basename(self.original_name)).suffix.lstrip(".").lower()

    @property
    def inner_extensions(self) -> list[str]:
        """Extensions hidden before the final one, e.g. ``["php"]`` for ``a.php.jpg``."""
        suffixes = PurePosixPath(_basename(self.original_name)).suffixes
        return [s.lstrip(".").lower() for s in suffixes[:-1]]

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        original_name: str,
        declared_mime_type: str = DEFAULT_MIME_TYPE,
        declared_size: int | None = None,
    ) -> "CandidateFile":
        return cls(
            original_name=original_name,
            declared_mime_type=declared_mime_type,
            declared_size=len(data) if declared_size is None else declared_size,
            opener=lambda: io.BytesIO(data),
        )

    @classmethod
    def from_path(
        cls,
        path: Path,
        declared_mime_type: str | None = None,
        original_name: str | None = None,
    ) -> "CandidateFile":
        """Build a candidate that streams from a file on disk."""
        if declared_mime_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            declared_mime_type = guessed or DEFAULT_MIME_TYPE
        return cls(
            original_name=original_name or path.name,
            declared_mime_type=declared_mime_type,
            declared_size=path.stat().st_size,
            opener=lambda: path.open("rb"),
        )


class ViolationKind(str, Enum):
    SIZE = "size"
    EMPTY = "empty"
    MIME = "mime"
    EXTENSION = "extension"
    SIGNATURE_MISMATCH = "signature-mismatch"
    SUSPECTED_MALICIOUS = "suspected-malicious"


@dataclass(frozen=True)
class Violation:
    """Single policy or security violation."""

    kind: ViolationKind
    message: str


@dataclass(frozen=True)
class ValidationOutcome:
    """Everything the validator found about one candidate file."""

    violations: tuple[Violation, ...] = ()
    security_issues: tuple[str, ...] = ()
    actual_size: int | None = None
    detected_mime_type: str | None = None
    checksum_sha256: str | None = None

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def kinds(self) -> list[ViolationKind]:
        return [v.kind for v in self.violations]

    def summary(self) -> str:
        return "; ".join(f"{v.kind.value}: {v.message}" for v in self.violations)
