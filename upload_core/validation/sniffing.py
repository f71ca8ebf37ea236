"""Content-based MIME detection backed by libmagic."""

import magic

from upload_core.policy.mime_types import normalize_mime_type


def sniff_mime_type(prefix: bytes) -> str | None:
    """Return the MIME type libmagic reports for ``prefix``, or None if there is no content."""
    if not prefix:
        return None
    return normalize_mime_type(magic.from_buffer(prefix, mime=True))
