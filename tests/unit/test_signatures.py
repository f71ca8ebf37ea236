import pytest

from upload_core.validation.signatures import (
    Signature,
    detect_executable,
    is_text_mime_type,
    signatures_for,
)


class TestSignatureHelpers:
    def test_signature_with_offset(self) -> None:
        sig = Signature(((0, b"RIFF"), (8, b"WEBP")))
        assert sig.matches(b"RIFFxxxxWEBP")
        assert not sig.matches(b"RIFFxxxxWAVE")

    def test_signatures_for_normalizes(self) -> None:
        assert signatures_for("IMAGE/PNG; charset=binary")
        assert signatures_for("application/x-unknown") == ()

    @pytest.mark.parametrize(
        "mime", ["text/plain", "text/csv", "application/json", "image/svg+xml"]
    )
    def test_text_types(self, mime: str) -> None:
        assert is_text_mime_type(mime)

    def test_binary_type_is_not_text(self) -> None:
        assert not is_text_mime_type("image/png")


class TestDetectExecutable:
    @pytest.mark.parametrize(
        ("prefix", "expected"),
        [
            (b"MZ\x90\x00", "windows-executable"),
            (b"\x7fELF\x02\x01", "elf-executable"),
            (b"\xcf\xfa\xed\xfe", "mach-o-executable"),
            (b"#!/usr/bin/env python", "script-shebang"),
        ],
    )
    def test_detects(self, prefix: bytes, expected: str) -> None:
        assert detect_executable(prefix) == expected

    def test_plain_image_is_not_executable(self) -> None:
        assert detect_executable(b"\x89PNG\r\n\x1a\n") is None
