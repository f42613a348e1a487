"""
Node 1 — Retriever (Fetcher).

Reads: state["pdf_url"]
Writes: state["pdf_bytes"], state["fetch_error"]

Delegates to PdfFetcher.retrieve(). When retrieval fails for a URL that a
vendor rule recognises, the error is parked in state and the graph routes to
vendor_fallback instead of failing; otherwise the RetrievalError propagates.
"""

import logging
import time
from typing import Any

from errors import RetrievalError
from state import PipelineState
from tools.pdf_fetcher import PdfFetcher

logger = logging.getLogger("pipeline")


def fetcher_node(state: PipelineState, fetcher: PdfFetcher) -> dict[str, Any]:
    started_at = time.time()

    logs: list[dict] = list(state.get("logs") or [])
    pipeline_trace: list[dict] = list(state.get("pipeline_trace") or [])

    ts = lambda: int(time.time() * 1000)  # noqa: E731

    url = state["pdf_url"]
    run_id = state.get("run_id", "-")
    logs.append({"agent": "fetcher", "msg": f"Fetching {url}", "ts": ts()})

    pdf_bytes = None
    fetch_error = None
    try:
        pdf_bytes = fetcher.retrieve(url)
        logs.append({"agent": "fetcher", "msg": f"Retrieved {len(pdf_bytes)} bytes of PDF", "ts": ts()})
    except RetrievalError as exc:
        if not fetcher.vendor_rules_for(url):
            logger.error("[%s] PDF fetch error: %s", run_id, exc)
            raise
        logger.warning("[%s] PDF fetch error, vendor fallback pending: %s", run_id, exc.message)
        logs.append({"agent": "fetcher", "msg": f"Primary retrieval failed: {exc.message}", "ts": ts()})
        fetch_error = exc

    duration_ms = int((time.time() - started_at) * 1000)
    pipeline_trace.append({"agent": "fetcher", "started_at": started_at, "ms": duration_ms})

    return {
        "pdf_bytes": pdf_bytes,
        "fetch_error": fetch_error,
        "logs": logs,
        "pipeline_trace": pipeline_trace,
    }


def route_after_fetcher(state: PipelineState) -> str:
    """Go to vendor alternatives only when the primary fetch failed; any retrieved body goes to the reader."""
    if state.get("fetch_error") is not None:
        return "vendor_fallback"
    return "reader"
