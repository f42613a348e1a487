"""
Pydantic v2 models — request/response contract for the HTTP front end plus the
immutable extraction result handed back by the pipeline.

Field names on the public contract are camelCase to match the web client.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# 1. Extraction result
# ---------------------------------------------------------------------------

class ExtractionResult(BaseModel):
    """Unique ISINs sorted ascending, plus their count."""

    model_config = ConfigDict(frozen=True)

    isins: list[str] = Field(default_factory=list)
    count: int = 0

    @model_validator(mode="after")
    def _count_matches_isins(self) -> "ExtractionResult":
        if self.count != len(self.isins):
            raise ValueError(f"count={self.count} does not match {len(self.isins)} isins")
        return self

    @classmethod
    def from_isins(cls, isins: list[str]) -> "ExtractionResult":
        return cls(isins=list(isins), count=len(isins))


class ExtractionOutcome(BaseModel):
    """Everything the pipeline learned about one document.

    Only ``result`` reaches the client by default; the rest feeds the debug
    payload and the logs.
    """

    model_config = ConfigDict(frozen=True)

    pdf_url: str
    result: ExtractionResult
    text_length: int
    text_sample: str
    pages: int
    trace: list[dict[str, Any]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# 2. POST /extract-isin
# ---------------------------------------------------------------------------

class ExtractRequest(BaseModel):
    pdfUrl: Optional[str] = None
    debug: Optional[bool] = False


class ExtractResponse(BaseModel):
    pdfUrl: str
    isins: list[str]
    count: int
    debug: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: str
    debug: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# 3. POST /test-url
# ---------------------------------------------------------------------------

class ProbeRequest(BaseModel):
    url: Optional[str] = None


class ProbeResult(BaseModel):
    status: int
    contentType: str
    contentLength: int
    isPdf: bool
    headerPreview: str
    redirects: bool
    finalUrl: str
