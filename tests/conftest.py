import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

PNG_HEADER = b"\x89PNG\r\n\x1a\n"
JPEG_HEADER = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00"
GIF_HEADER = b"GIF89a"


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    return PNG_HEADER + b"\x00\x00\x00\rIHDR" + b"\x01" * 200


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return JPEG_HEADER + b"\x02" * 200


@pytest.fixture()
def gif_bytes() -> bytes:
    return GIF_HEADER + b"\x03" * 100
