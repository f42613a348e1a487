# PDF text extraction wrapper — glyph/layout decoding is pdfplumber's job.
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

import pdfplumber

from errors import DecodeError

logger = logging.getLogger("pdf_reader")


@dataclass(frozen=True)
class DecodedPdf:
    text: str
    page_count: int


def extract_pdf_text(pdf_bytes: bytes) -> DecodedPdf:
    """Extract full text from a PDF using pdfplumber.

    Args:
        pdf_bytes: Raw PDF bytes as downloaded.

    Returns:
        DecodedPdf with the pages' text joined by newlines and the page count.

    Raises:
        DecodeError: pdfplumber/pdfminer could not parse the document.
    """
    pages = []
    try:
        with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text() or "")
    except Exception as exc:
        raise DecodeError(f"Could not decode PDF: {exc}") from exc
    return DecodedPdf(text="\n".join(pages), page_count=len(pages))


def decode_pdf(pdf_bytes: bytes, timeout: Optional[float] = None, decoder=extract_pdf_text) -> DecodedPdf:
    """Run ``decoder`` with a hard upper bound on how long the caller waits.

    The worker thread cannot be killed, so a decode that overruns keeps running
    in the background; the request itself fails with DecodeError on time.
    """
    if timeout is None:
        return decoder(pdf_bytes)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-decode")
    try:
        future = executor.submit(decoder, pdf_bytes)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            logger.warning("PDF decode exceeded %.0fs (%d bytes)", timeout, len(pdf_bytes))
            raise DecodeError(f"PDF decode timed out after {timeout:g}s") from exc
    finally:
        executor.shutdown(wait=False)
