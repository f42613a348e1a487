"""
Node 1b — Vendor fallback.

Reads: state["pdf_url"], state["fetch_error"]
Writes: state["pdf_bytes"]

Best-effort: walks each matching vendor rule's alternative URLs and keeps the
first one that serves real PDF bytes. When all of them miss, the original
RetrievalError from the fetcher is raised.
"""

import logging
import time
from typing import Any

from errors import RetrievalError
from state import PipelineState
from tools.pdf_fetcher import PdfFetcher

logger = logging.getLogger("pipeline")


def vendor_fallback_node(state: PipelineState, fetcher: PdfFetcher) -> dict[str, Any]:
    started_at = time.time()

    logs: list[dict] = list(state.get("logs") or [])
    pipeline_trace: list[dict] = list(state.get("pipeline_trace") or [])

    ts = lambda: int(time.time() * 1000)  # noqa: E731

    url = state["pdf_url"]
    run_id = state.get("run_id", "-")

    pdf_bytes = None
    for rule in fetcher.vendor_rules_for(url):
        logger.info("[%s] Trying alternative %s PDF URLs...", run_id, rule.name)
        for alt_url in rule.alternatives(url):
            logger.info("[%s] Trying: %s", run_id, alt_url)
            pdf_bytes = fetcher.fetch_direct(alt_url)
            if pdf_bytes:
                logger.info("[%s] Success with alternative URL: %s", run_id, alt_url)
                logs.append({"agent": "vendor_fallback", "msg": f"Recovered PDF from {alt_url}", "ts": ts()})
                break
        if pdf_bytes:
            break

    if not pdf_bytes:
        logs.append({"agent": "vendor_fallback", "msg": "No alternative URL served a PDF", "ts": ts()})
        raise state.get("fetch_error") or RetrievalError("Could not retrieve PDF from the provided URL")

    duration_ms = int((time.time() - started_at) * 1000)
    pipeline_trace.append({"agent": "vendor_fallback", "started_at": started_at, "ms": duration_ms})

    return {
        "pdf_bytes": pdf_bytes,
        "fetch_error": None,
        "logs": logs,
        "pipeline_trace": pipeline_trace,
    }
