"""Extension and MIME type vocabulary shared by policy checks and validation."""

import mimetypes

EXTENSION_MIME_TYPES: dict[str, frozenset[str]] = {
    "jpg": frozenset({"image/jpeg", "image/jpg", "image/pjpeg"}),
    "jpeg": frozenset({"image/jpeg", "image/jpg", "image/pjpeg"}),
    "png": frozenset({"image/png"}),
    "gif": frozenset({"image/gif"}),
    "webp": frozenset({"image/webp"}),
    "bmp": frozenset({"image/bmp", "image/x-ms-bmp"}),
    "tif": frozenset({"image/tiff"}),
    "tiff": frozenset({"image/tiff"}),
    "svg": frozenset({"image/svg+xml"}),
    "ico": frozenset({"image/x-icon", "image/vnd.microsoft.icon"}),
    "pdf": frozenset({"application/pdf", "application/x-pdf"}),
    "zip": frozenset({"application/zip", "application/x-zip-compressed"}),
    "gz": frozenset({"application/gzip", "application/x-gzip"}),
    "docx": frozenset(
        {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
    ),
    "xlsx": frozenset(
        {"application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"}
    ),
    "pptx": frozenset(
        {"application/vnd.openxmlformats-officedocument.presentationml.presentation"}
    ),
    "doc": frozenset({"application/msword"}),
    "xls": frozenset({"application/vnd.ms-excel"}),
    "txt": frozenset({"text/plain"}),
    "csv": frozenset({"text/csv", "text/plain"}),
    "md": frozenset({"text/markdown", "text/plain"}),
    "json": frozenset({"application/json"}),
    "xml": frozenset({"application/xml", "text/xml"}),
    "html": frozenset({"text/html"}),
    "mp3": frozenset({"audio/mpeg"}),
    "wav": frozenset({"audio/wav", "audio/x-wav"}),
    "ogg": frozenset({"audio/ogg"}),
    "mp4": frozenset({"video/mp4"}),
    "mov": frozenset({"video/quicktime"}),
    "webm": frozenset({"video/webm"}),
}


def normalize_mime_type(mime_type: str) -> str:
    """Lower-case a MIME type and drop parameters such as ``; charset=utf-8``."""
    return mime_type.split(";", 1)[0].strip().lower()


def normalize_extension(extension: str) -> str:
    return extension.strip().lstrip(".").lower()


def plausible_mime_types(extension: str) -> frozenset[str]:
    """Return the MIME types a file with this extension could legitimately carry."""
    ext = normalize_extension(extension)
    known = EXTENSION_MIME_TYPES.get(ext)
    if known is not None:
        return known
    guessed, _ = mimetypes.guess_type(f"file.{ext}", strict=False)
    return frozenset({guessed}) if guessed else frozenset()
