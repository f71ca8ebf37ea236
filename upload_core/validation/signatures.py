"""Magic-number tables for checking content against its declared MIME family."""

from dataclasses import dataclass

from upload_core.policy.mime_types import normalize_mime_type


@dataclass(frozen=True)
class Signature:
    """Byte patterns that must all appear at their offsets."""

    parts: tuple[tuple[int, bytes], ...]

    def matches(self, prefix: bytes) -> bool:
        return all(
            prefix[offset : offset + len(magic)] == magic for offset, magic in self.parts
        )


def _sig(*parts: bytes | tuple[int, bytes]) -> Signature:
    return Signature(
        tuple(part if isinstance(part, tuple) else (0, part) for part in parts)
    )


_JPEG = (_sig(b"\xff\xd8\xff"),)
_ZIP = (_sig(b"PK\x03\x04"), _sig(b"PK\x05\x06"), _sig(b"PK\x07\x08"))
_OLE = (_sig(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"),)
_BMP = (_sig(b"BM"),)
_ICO = (_sig(b"\x00\x00\x01\x00"),)
_PDF = (_sig(b"%PDF-"),)
_GZIP = (_sig(b"\x1f\x8b"),)
_WAV = (_sig(b"RIFF", (8, b"WAVE")),)
_ISO_MEDIA = (_sig((4, b"ftyp")),)

MIME_SIGNATURES: dict[str, tuple[Signature, ...]] = {
    "image/jpeg": _JPEG,
    "image/jpg": _JPEG,
    "image/pjpeg": _JPEG,
    "image/png": (_sig(b"\x89PNG\r\n\x1a\n"),),
    "image/gif": (_sig(b"GIF87a"), _sig(b"GIF89a")),
    "image/webp": (_sig(b"RIFF", (8, b"WEBP")),),
    "image/bmp": _BMP,
    "image/x-ms-bmp": _BMP,
    "image/tiff": (_sig(b"II*\x00"), _sig(b"MM\x00*")),
    "image/x-icon": _ICO,
    "image/vnd.microsoft.icon": _ICO,
    "application/pdf": _PDF,
    "application/x-pdf": _PDF,
    "application/zip": _ZIP,
    "application/x-zip-compressed": _ZIP,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": _ZIP,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": _ZIP,
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": _ZIP,
    "application/msword": _OLE,
    "application/vnd.ms-excel": _OLE,
    "application/gzip": _GZIP,
    "application/x-gzip": _GZIP,
    "audio/mpeg": (_sig(b"ID3"), _sig(b"\xff\xfb"), _sig(b"\xff\xf3"), _sig(b"\xff\xf2")),
    "audio/wav": _WAV,
    "audio/x-wav": _WAV,
    "audio/ogg": (_sig(b"OggS"),),
    "video/mp4": _ISO_MEDIA,
    "video/quicktime": _ISO_MEDIA,
    "video/webm": (_sig(b"\x1a\x45\xdf\xa3"),),
}

TEXT_MIME_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "image/svg+xml",
    }
)

MARKUP_MIME_TYPES = frozenset({"image/svg+xml", "text/html", "application/xml", "text/xml"})
MARKUP_EXTENSIONS = frozenset({"svg", "html", "htm", "xhtml", "xml"})

EXECUTABLE_SIGNATURES: dict[str, tuple[Signature, ...]] = {
    "windows-executable": (_sig(b"MZ"),),
    "elf-executable": (_sig(b"\x7fELF"),),
    "mach-o-executable": (
        _sig(b"\xfe\xed\xfa\xce"),
        _sig(b"\xfe\xed\xfa\xcf"),
        _sig(b"\xce\xfa\xed\xfe"),
        _sig(b"\xcf\xfa\xed\xfe"),
        _sig(b"\xca\xfe\xba\xbe"),
    ),
    "script-shebang": (_sig(b"#!"),),
}

DANGEROUS_EXTENSIONS = frozenset(
    {
        "apk", "app", "asp", "aspx", "bash", "bat", "cgi", "cmd", "com", "cpl",
        "dll", "exe", "hta", "jar", "js", "jse", "jsp", "lnk", "msi", "php",
        "php5", "phtml", "pif", "pl", "ps1", "py", "reg", "scr", "sh", "vbe",
        "vbs", "wsf",
    }
)

EMBEDDED_SCRIPT_PATTERNS: tuple[bytes, ...] = (
    b"<script",
    b"javascript:",
    b"onload=",
    b"onerror=",
)

PDF_ACTIVE_CONTENT_PATTERNS: tuple[bytes, ...] = (
    b"/javascript",
    b"/launch",
    b"/embeddedfile",
)


def is_text_mime_type(mime_type: str) -> bool:
    mime = normalize_mime_type(mime_type)
    return mime.startswith("text/") or mime in TEXT_MIME_TYPES


def signatures_for(mime_type: str) -> tuple[Signature, ...]:
    return MIME_SIGNATURES.get(normalize_mime_type(mime_type), ())


def detect_executable(prefix: bytes) -> str | None:
    for tag, signatures in EXECUTABLE_SIGNATURES.items():
        if any(sig.matches(prefix) for sig in signatures):
            return tag
    return None
