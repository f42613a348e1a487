"""
Shared test fixtures for unit tests.
"""

import sys
import os

# Ensure the backend directory is on the path so imports resolve correctly
# when pytest is run from the repo root or the backend directory.
_backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

from typing import Callable

import httpx
import pytest

from config import Settings
from tools.pdf_fetcher import PdfFetcher
from tools.pdf_reader import DecodedPdf


# ---------------------------------------------------------------------------
# PDF / HTML payloads
# ---------------------------------------------------------------------------


def make_pdf_bytes(lines: list[str]) -> bytes:
    """Build a minimal single-page PDF whose text layer contains ``lines``.

    Offsets in the xref table are computed from the actual object positions,
    so pdfminer parses it without falling back to repair mode.
    """
    content_ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        content_ops.append(f"({escaped}) Tj T*")
    content_ops.append("ET")
    stream = "\n".join(content_ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


FAKE_PDF = b"%PDF-1.4\n% not a real document, decoder is stubbed\n%%EOF\n"

LANDING_PAGE_HTML = b"""<!DOCTYPE html>
<html><head><title>Annual report</title></head>
<body><a class="download" href="/docs/report.pdf">Download</a></body></html>
"""


# ---------------------------------------------------------------------------
# Transport helpers
# ---------------------------------------------------------------------------


class RecordingRouter:
    """httpx.MockTransport handler that serves canned responses by URL and records calls."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response]] | None = None):
        self.routes = dict(routes or {})
        self.calls: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get(str(request.url))
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.calls]


def pdf_response(body: bytes = FAKE_PDF, content_type: str = "application/pdf"):
    return lambda request: httpx.Response(200, content=body, headers={"content-type": content_type})


def html_response(body: bytes = LANDING_PAGE_HTML, status: int = 200):
    return lambda request: httpx.Response(status, content=body, headers={"content-type": "text/html; charset=utf-8"})


def fake_decoder(text: str = "", pages: int = 1) -> Callable[[bytes], DecodedPdf]:
    return lambda pdf_bytes: DecodedPdf(text=text, page_count=pages)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        fetch_timeout_seconds=5.0,
        fallback_timeout_seconds=5.0,
        probe_timeout_seconds=5.0,
        decode_timeout_seconds=5.0,
    )


@pytest.fixture
def router() -> RecordingRouter:
    return RecordingRouter()


@pytest.fixture
def fetcher(settings: Settings, router: RecordingRouter) -> PdfFetcher:
    return PdfFetcher(settings, transport=httpx.MockTransport(router))
