from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from upload_core.storage.models import StorageKey
from upload_core.validation.models import Violation


class FailureKind(str, Enum):
    VALIDATION = "validation"
    STORAGE_ERROR = "storage-error"
    READ_ERROR = "read-error"
    CONTENT_CHANGED = "content-changed"
    CANCELLED = "cancelled"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class UploadSuccess:
    """A file that passed validation and was committed to storage."""

    upload_id: str
    storage_key: StorageKey
    original_name: str
    mime_type: str
    size: int
    checksum_sha256: str
    uploaded_at: datetime
    metadata: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))
    status: str = "succeeded"

    @property
    def ok(self) -> bool:
        return True

    def as_record(self) -> dict[str, object]:
        """Flat mapping the caller can write into its own metadata store."""
        return {
            "upload_id": self.upload_id,
            "file_name": self.storage_key.key.rsplit("/", 1)[-1],
            "original_file_name": self.original_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "path": self.storage_key.key,
            "url": self.storage_key.public_url,
            "checksum_sha256": self.checksum_sha256,
            "uploaded_at": self.uploaded_at.isoformat(),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class UploadFailure:
    """A file whose pipeline stopped before anything was committed."""

    original_name: str
    kind: FailureKind
    message: str
    violations: tuple[Violation, ...] = ()
    security_issues: tuple[str, ...] = ()
    status: str = "failed"

    @property
    def ok(self) -> bool:
        return False


UploadResult = UploadSuccess | UploadFailure


@dataclass(frozen=True)
class BatchResult:
    """Per-file results in submission order plus derived counts."""

    results: tuple[UploadResult, ...] = ()

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def successes(self) -> list[UploadSuccess]:
        return [r for r in self.results if isinstance(r, UploadSuccess)]

    def failures(self) -> list[UploadFailure]:
        return [r for r in self.results if isinstance(r, UploadFailure)]

    def errors(self) -> list[str]:
        return [f"{r.original_name}: {r.message}" for r in self.failures()]

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[UploadResult]:
        return iter(self.results)

    def __getitem__(self, index: int) -> UploadResult:
        return self.results[index]
