"""
FastAPI app — ISIN Extractor API.

Endpoints:
  GET   /              Service metadata
  GET   /health        Liveness probe
  POST  /extract-isin  { pdfUrl, debug? } → { pdfUrl, isins, count, debug? }
  POST  /test-url      { url } → what a plain GET on the URL returns (diagnostics)

Every error body is { error, debug? }; debug is only included when the caller
asked for it.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import load_settings
from errors import InternalError, IsinExtractorError
from pipeline import IsinPipeline
from schemas import ErrorResponse, ExtractRequest, ExtractResponse, ProbeRequest

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

settings = load_settings()

logger = logging.getLogger("isin")
logging.basicConfig(level=settings.log_level.upper())

API_NAME = "ISIN Extractor API"
API_VERSION = "1.0.0"

app = FastAPI(title=API_NAME, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

pipeline = IsinPipeline(settings)


def _error_response(status_code: int, message: str, debug: Optional[dict[str, Any]] = None) -> JSONResponse:
    body = ErrorResponse(error=message, debug=debug)
    return JSONResponse(body.model_dump(exclude_none=True), status_code=status_code)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    """Reject bodies over settings.max_body_bytes before they are parsed."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > settings.max_body_bytes:
        return _error_response(413, "Request body too large")
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return _error_response(400, "Invalid request body")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/")
async def root():
    """Service metadata."""
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "endpoints": {
            "health": "GET /health",
            "extractIsin": "POST /extract-isin",
            "testUrl": "POST /test-url",
        },
    }


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/extract-isin")
async def extract_isin(body: Optional[ExtractRequest] = None):
    """Fetch the PDF behind pdfUrl and return every ISIN found in its text."""
    body = body or ExtractRequest()
    debug = bool(body.debug)

    loop = asyncio.get_running_loop()
    try:
        outcome = await loop.run_in_executor(None, pipeline.process, body.pdfUrl)
    except IsinExtractorError as exc:
        return _error_response(
            exc.status_code,
            exc.user_message,
            {"originalError": exc.message, **exc.details} if debug else None,
        )
    except Exception as exc:
        logger.exception("Unhandled failure in /extract-isin")
        internal = InternalError(str(exc))
        return _error_response(
            internal.status_code,
            internal.user_message,
            {"originalError": internal.message} if debug else None,
        )

    response = ExtractResponse(
        pdfUrl=outcome.pdf_url,
        isins=outcome.result.isins,
        count=outcome.result.count,
        debug={
            "textLength": outcome.text_length,
            "textSample": outcome.text_sample,
            "pages": outcome.pages,
            "trace": outcome.trace,
        } if debug else None,
    )
    return response.model_dump(exclude_none=True)


@app.post("/test-url")
async def probe_url(body: Optional[ProbeRequest] = None):
    """Debug helper: report status, content-type and first bytes of a URL."""
    if body is None or not body.url or not body.url.strip():
        return _error_response(400, "url is required")

    loop = asyncio.get_running_loop()
    try:
        probe = await loop.run_in_executor(None, pipeline.fetcher.probe, body.url.strip())
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("Probe of %s failed: %s", body.url, exc)
        return JSONResponse({"error": str(exc), "code": type(exc).__name__}, status_code=500)

    return probe.model_dump()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
