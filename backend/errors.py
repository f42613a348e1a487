"""
Failure taxonomy for the extraction pipeline.

Every error carries an HTTP status and a user-readable message. The raw
``message`` is for logs and the opt-in debug payload; ``user_message`` is what
the client sees.
"""

from __future__ import annotations

from typing import Any, Optional


class IsinExtractorError(Exception):
    """Base exception for all pipeline failures."""

    status_code = 500
    public_message = "Failed to process the PDF"
    expose_message = False

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def user_message(self) -> str:
        return self.message if self.expose_message else self.public_message

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class BadRequestError(IsinExtractorError):
    """Missing or blank input."""

    status_code = 400
    expose_message = True


class RetrievalError(IsinExtractorError):
    """The fetcher exhausted every strategy without getting PDF bytes.

    ``timed_out`` is set when every attempt failed on a timeout, and
    ``upstream_status`` when every attempt got a 5xx back (last one wins).
    """

    status_code = 400
    public_message = (
        "Could not retrieve PDF from the provided URL. The URL might require "
        "authentication, be blocked, or the PDF might not be accessible. Try "
        "downloading the PDF and hosting it on a public service like Google "
        "Drive or Dropbox."
    )

    def __init__(
        self,
        message: str,
        attempts: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        attempts = attempts or []
        super().__init__(message, {"attempts": attempts} if attempts else None)
        self.attempts = attempts

    @property
    def timed_out(self) -> bool:
        return bool(self.attempts) and all(a["outcome"] == "timeout" for a in self.attempts)

    @property
    def upstream_status(self) -> Optional[int]:
        if self.attempts and all(a["outcome"] == "upstream_error" for a in self.attempts):
            return self.attempts[-1].get("status")
        return None


class EmptyDocumentError(IsinExtractorError):
    """The decoder produced no text (image-only or empty PDF)."""

    status_code = 400
    public_message = (
        "No text could be extracted from this PDF. The PDF might be image-based "
        "or the text might not be extractable."
    )


class UpstreamTimeoutError(IsinExtractorError):
    status_code = 408
    public_message = (
        "Request timed out. The PDF file might be too large or the server is "
        "slow to respond."
    )


class UpstreamHttpError(IsinExtractorError):
    """Upstream answered with an error status; the status is propagated."""

    def __init__(self, status: int, reason: str = "", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(f"Upstream returned {status} {reason}".strip(), details)
        self.status_code = status
        self.reason = reason

    @property
    def user_message(self) -> str:
        return f"Server returned error: {self.status_code} {self.reason}".strip()


class InternalError(IsinExtractorError):
    """Anything not otherwise classified."""


class DecodeError(InternalError):
    """pdfplumber could not decode the bytes (corrupt/encrypted PDF or timeout)."""
