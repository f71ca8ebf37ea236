"""Checks candidate files against an upload policy before anything is stored."""

import hashlib
from typing import BinaryIO

from upload_core.logging.logger import Log
from upload_core.policy.mime_types import normalize_mime_type
from upload_core.policy.models import UploadPolicy
from upload_core.validation.exceptions import FileReadError
from upload_core.validation.models import (
    CandidateFile,
    ValidationOutcome,
    Violation,
    ViolationKind,
)
from upload_core.validation.signatures import (
    DANGEROUS_EXTENSIONS,
    EMBEDDED_SCRIPT_PATTERNS,
    MARKUP_EXTENSIONS,
    MARKUP_MIME_TYPES,
    PDF_ACTIVE_CONTENT_PATTERNS,
    detect_executable,
    is_text_mime_type,
    signatures_for,
)
from upload_core.validation.sniffing import sniff_mime_type

_CONTROL_CHARS = frozenset(chr(c) for c in range(32)) | {"\x7f"}


class Validator:
    """Runs every policy and security check and collects all violations.

    Checks never short-circuit: the caller gets the full list of problems
    for diagnostics. Stream read faults are raised as ``FileReadError``.
    """

    SIGNATURE_PREFIX_BYTES = 2048
    SCAN_CHUNK_BYTES = 64 * 1024

    def validate(self, file: CandidateFile, policy: UploadPolicy) -> ValidationOutcome:
        """Validate one candidate against ``policy``.

        Raises:
            ConfigurationError: if the policy itself is malformed.
            FileReadError: if the byte stream cannot be read.
        """
        policy.ensure_valid()
        prefix, actual_size, checksum = self._read_stream(file)
        detected = sniff_mime_type(prefix)
        if actual_size != file.declared_size:
            Log.debug(
                f"Declared size {file.declared_size} of '{file.original_name}' "
                f"differs from actual {actual_size}"
            )

        violations: list[Violation] = []
        violations.extend(self._check_size(actual_size, policy))
        violations.extend(self._check_extension(file, policy))
        violations.extend(self._check_mime(file, policy))
        if policy.enable_security and actual_size > 0:
            violations.extend(self._check_signature(file, prefix, detected))

        security_issues = self._scan_security(file, prefix, detected)
        if policy.enable_security:
            violations.extend(
                Violation(
                    ViolationKind.SUSPECTED_MALICIOUS,
                    f"'{file.original_name}' flagged as {issue}",
                )
                for issue in security_issues
            )

        return ValidationOutcome(
            violations=tuple(violations),
            security_issues=tuple(security_issues),
            actual_size=actual_size,
            detected_mime_type=detected,
            checksum_sha256=checksum,
        )

    def _read_stream(self, file: CandidateFile) -> tuple[bytes, int, str]:
        """Read the whole stream once: signature prefix, byte count and sha256."""
        digest = hashlib.sha256()
        try:
            with file.open() as stream:
                prefix = _read_up_to(stream, self.SIGNATURE_PREFIX_BYTES)
                digest.update(prefix)
                size = len(prefix)
                while chunk := stream.read(self.SCAN_CHUNK_BYTES):
                    digest.update(chunk)
                    size += len(chunk)
        except OSError as exc:
            raise FileReadError(f"Failed to read '{file.original_name}': {exc}") from exc
        return prefix, size, digest.hexdigest()

    @staticmethod
    def _check_size(actual_size: int, policy: UploadPolicy) -> list[Violation]:
        if actual_size == 0:
            return [Violation(ViolationKind.EMPTY, "File is empty")]
        if actual_size > policy.max_file_size:
            return [
                Violation(
                    ViolationKind.SIZE,
                    f"File too large: {actual_size} bytes (max: {policy.max_file_size})",
                )
            ]
        return []

    @staticmethod
    def _check_extension(file: CandidateFile, policy: UploadPolicy) -> list[Violation]:
        ext = file.extension
        if policy.allows_extension(ext):
            return []
        shown = f"'.{ext}'" if ext else "(none)"
        return [
            Violation(
                ViolationKind.EXTENSION,
                f"Extension {shown} is not allowed. Allowed: {sorted(policy.allowed_extensions)}",
            )
        ]

    @staticmethod
    def _check_mime(file: CandidateFile, policy: UploadPolicy) -> list[Violation]:
        if policy.allows_mime_type(file.declared_mime_type):
            return []
        return [
            Violation(
                ViolationKind.MIME,
                f"MIME type '{file.declared_mime_type}' is not allowed. "
                f"Allowed: {sorted(policy.allowed_mime_types)}",
            )
        ]

    @staticmethod
    def _check_signature(
        file: CandidateFile, prefix: bytes, detected: str | None
    ) -> list[Violation]:
        declared = normalize_mime_type(file.declared_mime_type)
        if is_text_mime_type(declared):
            if b"\x00" in prefix:
                return [
                    Violation(
                        ViolationKind.SIGNATURE_MISMATCH,
                        f"Declared text type '{declared}' but content is binary",
                    )
                ]
            return []
        signatures = signatures_for(declared)
        if not signatures or any(sig.matches(prefix) for sig in signatures):
            return []
        return [
            Violation(
                ViolationKind.SIGNATURE_MISMATCH,
                f"File signature does not match declared type '{declared}' "
                f"(detected: {detected or 'unknown'})",
            )
        ]

    def _scan_security(
        self, file: CandidateFile, prefix: bytes, detected: str | None
    ) -> list[str]:
        issues: list[str] = []
        name = file.original_name

        if any(ch in _CONTROL_CHARS for ch in name):
            issues.append("control-characters-in-name")
        if ".." in name.replace("\\", "/").split("/"):
            issues.append("path-traversal-in-name")

        if file.extension in DANGEROUS_EXTENSIONS:
            issues.append(f"dangerous-extension:{file.extension}")
        issues.extend(
            f"hidden-extension:{ext}"
            for ext in file.inner_extensions
            if ext in DANGEROUS_EXTENSIONS
        )

        executable = detect_executable(prefix)
        if executable is not None:
            issues.append(executable)

        declared = normalize_mime_type(file.declared_mime_type)
        if declared in MARKUP_MIME_TYPES or file.extension in MARKUP_EXTENSIONS:
            if self._stream_contains(file, EMBEDDED_SCRIPT_PATTERNS):
                issues.append("embedded-script")
        if "pdf" in declared or detected == "application/pdf" or file.extension == "pdf":
            if self._stream_contains(file, PDF_ACTIVE_CONTENT_PATTERNS):
                issues.append("pdf-active-content")

        if issues:
            Log.warning(f"Security scan flagged '{name}': {issues}")
        return issues

    def _stream_contains(self, file: CandidateFile, patterns: tuple[bytes, ...]) -> bool:
        """Case-insensitive search of the whole stream, chunk by chunk."""
        overlap = max(len(p) for p in patterns) - 1
        tail = b""
        try:
            with file.open() as stream:
                while chunk := stream.read(self.SCAN_CHUNK_BYTES):
                    window = (tail + chunk).lower()
                    if any(p in window for p in patterns):
                        return True
                    tail = window[-overlap:] if overlap else b""
        except OSError as exc:
            raise FileReadError(f"Failed to read '{file.original_name}': {exc}") from exc
        return False


def _read_up_to(stream: BinaryIO, size: int) -> bytes:
    """Read ``size`` bytes or until EOF, tolerating short reads."""
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)
