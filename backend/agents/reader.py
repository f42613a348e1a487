"""
Node 2 — PDF Reader.

Reads: state["pdf_bytes"]
Writes: state["text"], state["page_count"]

Decoding is time-bounded. A decode failure raises DecodeError (not retried);
a document with no extractable text raises EmptyDocumentError so it is never
confused with a real zero-match document.
"""

import logging
import time
from typing import Any, Callable, Optional

from errors import EmptyDocumentError
from state import PipelineState
from tools.pdf_reader import DecodedPdf, decode_pdf, extract_pdf_text

logger = logging.getLogger("pipeline")


def reader_node(
    state: PipelineState,
    decoder: Callable[[bytes], DecodedPdf] = extract_pdf_text,
    timeout: Optional[float] = None,
) -> dict[str, Any]:
    started_at = time.time()

    logs: list[dict] = list(state.get("logs") or [])
    pipeline_trace: list[dict] = list(state.get("pipeline_trace") or [])

    ts = lambda: int(time.time() * 1000)  # noqa: E731

    run_id = state.get("run_id", "-")
    pdf_bytes = state["pdf_bytes"]

    decoded = decode_pdf(pdf_bytes, timeout=timeout, decoder=decoder)
    text = decoded.text or ""
    logger.info("[%s] Extracted %d characters from %d-page PDF", run_id, len(text), decoded.page_count)

    if not text.strip():
        logger.warning("[%s] No text extracted from PDF! PDF might be image-based or empty.", run_id)
        raise EmptyDocumentError(
            "Decoder produced no text",
            {"extractedLength": len(text), "pages": decoded.page_count},
        )

    logger.debug("[%s] Sample of extracted text (first 1000 chars): %s", run_id, text[:1000])
    logs.append({"agent": "reader", "msg": f"Decoded {decoded.page_count} pages, {len(text)} chars", "ts": ts()})

    duration_ms = int((time.time() - started_at) * 1000)
    pipeline_trace.append({"agent": "reader", "started_at": started_at, "ms": duration_ms})

    return {
        "text": text,
        "page_count": decoded.page_count,
        "logs": logs,
        "pipeline_trace": pipeline_trace,
    }
