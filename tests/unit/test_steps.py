import hashlib
import io
from unittest.mock import MagicMock

import pytest

from upload_core.coordinator.models import FailureKind
from upload_core.coordinator.pipeline import UploadContext
from upload_core.coordinator.steps import GenerateKeyStep, StoreStep, ValidateStep
from upload_core.policy.models import UploadPolicy
from upload_core.storage.models import StoredObject
from upload_core.validation.exceptions import FileReadError
from upload_core.validation.models import (
    CandidateFile,
    ValidationOutcome,
    Violation,
    ViolationKind,
)

POLICY = UploadPolicy(max_file_size=100, upload_root="u")


def _context(data: bytes = b"abc", name: str = "a.txt") -> UploadContext:
    return UploadContext(file=CandidateFile.from_bytes(data, name, "text/plain"), policy=POLICY)


class TestValidateStep:
    def test_valid_outcome_leaves_no_failure(self) -> None:
        validator = MagicMock()
        validator.validate.return_value = ValidationOutcome(actual_size=3)

        ctx = ValidateStep(validator).run(_context())

        assert ctx.failure is None
        assert ctx.outcome is not None
        assert ctx.outcome.actual_size == 3

    def test_invalid_outcome_sets_validation_failure(self) -> None:
        validator = MagicMock()
        violation = Violation(ViolationKind.SIZE, "File too large")
        validator.validate.return_value = ValidationOutcome(
            violations=(violation,), security_issues=("dangerous-extension:exe",)
        )

        ctx = ValidateStep(validator).run(_context())

        assert ctx.failure is not None
        assert ctx.failure.kind is FailureKind.VALIDATION
        assert ctx.failure.violations == (violation,)
        assert ctx.failure.security_issues == ("dangerous-extension:exe",)
        assert ctx.failure.message == "size: File too large"


class TestGenerateKeyStep:
    def test_sets_key(self) -> None:
        generator = MagicMock()
        generator.generate_key.return_value = "u/abc.txt"
        ctx = _context()

        ctx = GenerateKeyStep(generator).run(ctx)

        assert ctx.key == "u/abc.txt"
        generator.generate_key.assert_called_once_with(ctx.file, POLICY)


class TestStoreStep:
    def test_stores_under_key(self) -> None:
        backend = MagicMock()
        backend.store.return_value = StoredObject("u/a.txt", "/srv/u/a.txt", "/f/u/a.txt", 3, "c")
        ctx = _context()
        ctx.key = "u/a.txt"

        ctx = StoreStep(backend).run(ctx)

        assert ctx.stored is backend.store.return_value
        source, key = backend.store.call_args.args
        assert key == "u/a.txt"
        assert source.closed

    def test_requires_key(self) -> None:
        with pytest.raises(ValueError, match="key"):
            StoreStep(MagicMock()).run(_context())

    def test_open_failure_is_read_error(self) -> None:
        def opener() -> io.BytesIO:
            raise FileNotFoundError("temp file vanished")

        ctx = UploadContext(file=CandidateFile("a.txt", "text/plain", 3, opener), policy=POLICY)
        ctx.key = "u/a.txt"
        backend = MagicMock()

        with pytest.raises(FileReadError, match="vanished"):
            StoreStep(backend).run(ctx)
        backend.store.assert_not_called()

    def test_changed_content_is_deleted_and_fails(self) -> None:
        backend = MagicMock()
        backend.store.return_value = StoredObject("u/a.txt", "/srv/u/a.txt", "/f/u/a.txt", 9, "d")
        ctx = _context()
        ctx.key = "u/a.txt"
        ctx.outcome = ValidationOutcome(
            actual_size=3, checksum_sha256=hashlib.sha256(b"abc").hexdigest()
        )

        ctx = StoreStep(backend).run(ctx)

        assert ctx.stored is None
        assert ctx.failure is not None
        assert ctx.failure.kind is FailureKind.CONTENT_CHANGED
        backend.delete.assert_called_once_with("u/a.txt")

    def test_matching_content_is_kept(self) -> None:
        digest = hashlib.sha256(b"abc").hexdigest()
        backend = MagicMock()
        backend.store.return_value = StoredObject(
            "u/a.txt", "/srv/u/a.txt", "/f/u/a.txt", 3, digest
        )
        ctx = _context()
        ctx.key = "u/a.txt"
        ctx.outcome = ValidationOutcome(actual_size=3, checksum_sha256=digest)

        ctx = StoreStep(backend).run(ctx)

        assert ctx.failure is None
        assert ctx.stored is backend.store.return_value
        backend.delete.assert_not_called()
