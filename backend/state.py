"""
PipelineState TypedDict — shared memory for all LangGraph nodes.

Each node reads from this dict and writes only to its own output keys.
Input keys (run_id, pdf_url) are set once by the pipeline and never modified.

Flow:
  fetcher → reader → extractor
  fetcher → vendor_fallback → reader → extractor   (preview URLs whose fetch failed)
"""

from __future__ import annotations

from typing import Optional, TypedDict

from errors import RetrievalError


class PipelineState(TypedDict, total=False):
    # ── INIT — set by IsinPipeline before graph.invoke() ─────────────────────
    run_id: str                 # short id for correlating log lines
    pdf_url: str                # trimmed, non-blank input URL
    logs: list[dict]            # Accumulates { agent, msg, ts } entries
    pipeline_trace: list[dict]  # Accumulates { agent, started_at, ms }

    # ── FETCHER OUTPUT ───────────────────────────────────────────────────────
    pdf_bytes: Optional[bytes]
    fetch_error: Optional[RetrievalError]  # set only when vendor_fallback should run

    # ── READER OUTPUT ────────────────────────────────────────────────────────
    text: str
    page_count: int

    # ── EXTRACTOR OUTPUT ─────────────────────────────────────────────────────
    isins: list[str]
