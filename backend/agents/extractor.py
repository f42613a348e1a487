"""
Node 3 — ISIN Extractor.

Reads: state["text"]
Writes: state["isins"]

Pure text scan (see tools/isin_parser.py). When nothing matches, the
near-miss patterns are logged to help diagnose mangled PDF text.
"""

import logging
import time
from typing import Any

from state import PipelineState
from tools.isin_parser import build_extraction_result, find_isin_like, find_uppercase_runs

logger = logging.getLogger("pipeline")


def extractor_node(state: PipelineState) -> dict[str, Any]:
    started_at = time.time()

    logs: list[dict] = list(state.get("logs") or [])
    pipeline_trace: list[dict] = list(state.get("pipeline_trace") or [])

    ts = lambda: int(time.time() * 1000)  # noqa: E731

    run_id = state.get("run_id", "-")
    text = state.get("text", "")

    potential = find_isin_like(text)
    if potential:
        logger.info("[%s] Found %d potential ISIN-like patterns: %s", run_id, len(potential), ", ".join(potential))

    result = build_extraction_result(text)
    isins = result.isins
    logger.info("[%s] Found %d unique ISIN codes", run_id, result.count)

    if isins:
        logger.info("[%s] ISINs found: %s", run_id, ", ".join(isins[:20]))
    else:
        logger.warning("[%s] No ISIN codes found in extracted text", run_id)
        runs = find_uppercase_runs(text)
        if runs:
            logger.info("[%s] Other uppercase patterns (might be partial ISINs): %s", run_id, ", ".join(runs))

    logs.append({"agent": "extractor", "msg": f"Matched {result.count} unique ISINs", "ts": ts()})

    duration_ms = int((time.time() - started_at) * 1000)
    pipeline_trace.append({"agent": "extractor", "started_at": started_at, "ms": duration_ms})

    return {
        "isins": isins,
        "logs": logs,
        "pipeline_trace": pipeline_trace,
    }
