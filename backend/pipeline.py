"""
IsinPipeline — the orchestrator behind POST /extract-isin.

Validates the input URL, runs the fetch → decode → extract graph, and turns
every failure into one of the categories in errors.py:

  BadRequestError        blank / missing URL (raised before any network call)
  RetrievalError         every fetch strategy exhausted
  UpstreamTimeoutError   every attempt timed out
  UpstreamHttpError      every attempt got an upstream 5xx (status propagated)
  EmptyDocumentError     the PDF decoded to no text
  DecodeError            pdfplumber failed on the bytes (an InternalError)
  InternalError          anything else
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from config import Settings
from errors import (
    BadRequestError,
    InternalError,
    IsinExtractorError,
    RetrievalError,
    UpstreamHttpError,
    UpstreamTimeoutError,
)
from graph import build_graph
from schemas import ExtractionOutcome, ExtractionResult
from state import PipelineState
from tools.pdf_fetcher import PdfFetcher
from tools.pdf_reader import DecodedPdf, extract_pdf_text

logger = logging.getLogger("pipeline")

_TEXT_SAMPLE_CHARS = 500


def classify_retrieval_error(exc: RetrievalError) -> IsinExtractorError:
    """Map an exhausted fetch onto timeout / upstream-status / plain retrieval failure."""
    if exc.timed_out:
        return UpstreamTimeoutError(exc.message, exc.details)
    if exc.upstream_status:
        return UpstreamHttpError(exc.upstream_status, details=exc.details)
    return exc


class IsinPipeline:
    """Stateless between calls; one instance serves every request."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[PdfFetcher] = None,
        decoder: Callable[[bytes], DecodedPdf] = extract_pdf_text,
    ) -> None:
        self.settings = settings or Settings()
        self.fetcher = fetcher or PdfFetcher(self.settings)
        self.graph = build_graph(
            self.fetcher,
            decoder=decoder,
            decode_timeout=self.settings.decode_timeout_seconds,
        )

    def process(self, pdf_url: Optional[str]) -> ExtractionOutcome:
        if not isinstance(pdf_url, str) or not pdf_url.strip():
            raise BadRequestError("pdfUrl is required")

        url = pdf_url.strip()
        run_id = uuid.uuid4().hex[:8]
        logger.info("[%s] Processing PDF: %s", run_id, url)

        initial_state: PipelineState = {
            "run_id": run_id,
            "pdf_url": url,
            "logs": [],
            "pipeline_trace": [],
        }

        try:
            result = self.graph.invoke(initial_state)
        except RetrievalError as exc:
            logger.error("[%s] Failed to retrieve the PDF: %s", run_id, exc)
            mapped = classify_retrieval_error(exc)
            if mapped is exc:
                raise
            raise mapped from exc
        except IsinExtractorError as exc:
            logger.error("[%s] Failed to process the PDF: %s", run_id, exc)
            raise
        except Exception as exc:
            logger.exception("[%s] Failed to process the PDF", run_id)
            raise InternalError(str(exc)) from exc

        text = result.get("text", "")
        return ExtractionOutcome(
            pdf_url=url,
            result=ExtractionResult.from_isins(result.get("isins", [])),
            text_length=len(text),
            text_sample=text[:_TEXT_SAMPLE_CHARS],
            pages=result.get("page_count", 0),
            trace=result.get("pipeline_trace", []),
        )
