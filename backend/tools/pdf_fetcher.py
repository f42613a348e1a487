"""
PDF Fetcher — best-effort retrieval of PDF bytes from a user-supplied URL.

Strategy per URL (tried one at a time, first success wins):
  1. GET with Accept: application/pdf
  2. GET with a browser-like Accept header
  3. GET on each matching vendor rule's direct-download URL

A response counts as a PDF when its body starts with ``%PDF`` or its
content-type says application/pdf (either is enough; servers mislabel both
ways). 5xx responses and transport errors fail the attempt. Anything else is
inspected: on the outermost call an HTML page is scanned for a PDF link, and
the highest-priority link, once resolved, is followed recursively (depth + 1)
when it differs from the URL just tried, instead of continuing with the
remaining attempts.

Usage:
    fetcher = PdfFetcher(settings)
    pdf_bytes = fetcher.retrieve("https://example.com/report")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from config import Settings
from errors import RetrievalError
from schemas import ProbeResult
from tools.link_finder import find_pdf_link, resolve_link
from tools.vendor_rules import VendorRule, match_vendor_rules

logger = logging.getLogger("pdf_fetcher")

MAX_DEPTH = 2
PDF_MAGIC = b"%PDF"

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
PDF_ACCEPT = "application/pdf"
BROWSER_ACCEPT = "application/pdf,application/octet-stream,*/*"

_PROBE_MAX_REDIRECTS = 5
_PROBE_PREVIEW_BYTES = 100


# ---------------------------------------------------------------------------
# Attempt / result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchAttempt:
    url: str
    label: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FetchResult:
    body: bytes
    content_type: str
    status: int
    final_url: str
    redirected: bool = False

    @property
    def header_snippet(self) -> bytes:
        return self.body[:4]

    @property
    def is_pdf(self) -> bool:
        return self.body.startswith(PDF_MAGIC) or "application/pdf" in self.content_type.lower()

    @property
    def is_html(self) -> bool:
        head = self.body[:5].lower()
        return (
            "text/html" in self.content_type.lower()
            or head.startswith(b"<!")
            or head.startswith(b"<html")
        )


def _base_headers(referer: str) -> dict[str, str]:
    return {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": referer,
    }


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


class PdfFetcher:
    """Synchronous, stateless between calls — safe to share across requests."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        vendor_rules: Optional[list[VendorRule]] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._transport = transport
        self._vendor_rules = vendor_rules

    # -----------------------------------------------------------------------
    # Plumbing
    # -----------------------------------------------------------------------

    def _client(self, timeout: float, max_redirects: int) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            max_redirects=max_redirects,
            transport=self._transport,
        )

    def _get(self, client: httpx.Client, url: str, headers: dict[str, str], timeout: float) -> FetchResult:
        """GET ``url`` and read the whole body within ``timeout`` seconds of wall-clock time.

        httpx timeouts bound each socket operation, not the total. Every request
        in the redirect chain gets only the time left on the deadline, and the
        body is checked against it chunk by chunk.
        """
        deadline = time.monotonic() + timeout

        def clamp_to_deadline(request: httpx.Request) -> None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise httpx.ConnectTimeout(f"Exceeded {timeout:g}s fetching {url}", request=request)
            request.extensions["timeout"] = httpx.Timeout(remaining).as_dict()

        client.event_hooks = {"request": [clamp_to_deadline], "response": []}
        with client.stream("GET", url, headers=headers) as response:
            chunks = []
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(
                        f"Exceeded {timeout:g}s reading {url}", request=response.request
                    )
            return FetchResult(
                body=b"".join(chunks),
                content_type=response.headers.get("content-type", ""),
                status=response.status_code,
                final_url=str(response.url),
                redirected=bool(response.history),
            )

    # -----------------------------------------------------------------------
    # Attempt planning
    # -----------------------------------------------------------------------

    def vendor_rules_for(self, url: str) -> list[VendorRule]:
        return match_vendor_rules(url, self._vendor_rules)

    def build_attempts(self, url: str) -> list[FetchAttempt]:
        base = _base_headers(url)
        attempts = [
            FetchAttempt(url, "direct-pdf", {**base, "Accept": PDF_ACCEPT}),
            FetchAttempt(url, "direct-browser", {**base, "Accept": BROWSER_ACCEPT}),
        ]
        for rule in self.vendor_rules_for(url):
            direct = rule.direct_url(url)
            if direct:
                attempts.append(
                    FetchAttempt(direct, f"vendor:{rule.name}", {**base, "Accept": PDF_ACCEPT})
                )
        return attempts

    # -----------------------------------------------------------------------
    # Retrieval
    # -----------------------------------------------------------------------

    def retrieve(self, url: str, depth: int = 0) -> bytes:
        """Return PDF bytes for ``url`` or raise RetrievalError.

        ``depth`` counts HTML-link hops; only the outermost call (depth 0)
        scans HTML for links, and anything beyond MAX_DEPTH fails without
        touching the network.
        """
        if depth > MAX_DEPTH:
            raise RetrievalError("Maximum redirect depth exceeded")

        outcomes: list[dict[str, Any]] = []
        timeout = self.settings.fetch_timeout_seconds

        with self._client(timeout, self.settings.max_redirects) as client:
            for attempt in self.build_attempts(url):
                logger.info("Trying to fetch (depth %d, %s): %s", depth, attempt.label, attempt.url)
                record: dict[str, Any] = {"url": attempt.url, "label": attempt.label}
                outcomes.append(record)

                try:
                    result = self._get(client, attempt.url, attempt.headers, timeout)
                except httpx.TimeoutException as exc:
                    logger.warning("Attempt %s timed out: %s", attempt.label, exc)
                    record.update(outcome="timeout", error=str(exc))
                    continue
                except (httpx.HTTPError, httpx.InvalidURL) as exc:
                    logger.warning("Attempt %s failed: %s", attempt.label, exc)
                    record.update(outcome="network_error", error=str(exc))
                    continue

                record.update(status=result.status, content_type=result.content_type)
                logger.info(
                    "Attempt %s: status=%d content-type=%r header=%r final-url=%s",
                    attempt.label, result.status, result.content_type,
                    result.header_snippet, result.final_url,
                )

                if result.status >= 500:
                    record["outcome"] = "upstream_error"
                    continue

                if result.is_pdf:
                    logger.info("Successfully retrieved PDF (%d bytes)", len(result.body))
                    return result.body

                record["outcome"] = "not_pdf"

                if depth == 0 and result.is_html:
                    link = self._find_followable_link(result, attempt.url)
                    if link:
                        return self.retrieve(link, depth + 1)

        raise RetrievalError("Could not retrieve PDF from the provided URL", attempts=outcomes)

    def _find_followable_link(self, result: FetchResult, attempt_url: str) -> Optional[str]:
        found = find_pdf_link(result.body.decode("utf-8", errors="replace"))
        if found is None:
            return None

        rule_name, raw_link = found
        try:
            link = resolve_link(attempt_url, raw_link)
        except ValueError as exc:
            logger.info("Error resolving PDF link %r from HTML: %s", raw_link, exc)
            return None
        logger.info("Found PDF link in HTML (%s rule): %s", rule_name, link)
        return link if link != attempt_url else None

    # -----------------------------------------------------------------------
    # Escape hatch + diagnostics
    # -----------------------------------------------------------------------

    def fetch_direct(self, url: str) -> Optional[bytes]:
        """Single GET that only accepts a 2xx response whose body starts with %PDF.

        Returns None on any failure; used for vendor fallbacks where misses are expected.
        """
        timeout = self.settings.fallback_timeout_seconds
        headers = {"User-Agent": BROWSER_USER_AGENT, "Accept": PDF_ACCEPT}
        try:
            with self._client(timeout, self.settings.max_redirects) as client:
                result = self._get(client, url, headers, timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.info("Direct fetch failed for %s: %s", url, exc)
            return None

        if not 200 <= result.status < 300:
            logger.info("Direct fetch for %s returned %d", url, result.status)
            return None
        if not result.body.startswith(PDF_MAGIC):
            logger.info("Direct fetch for %s returned non-PDF body (header=%r)", url, result.header_snippet)
            return None
        return result.body

    def probe(self, url: str) -> ProbeResult:
        """Report what a plain browser-like GET on ``url`` returns. Raises httpx errors."""
        timeout = self.settings.probe_timeout_seconds
        headers = {"User-Agent": BROWSER_USER_AGENT, "Accept": "*/*"}
        with self._client(timeout, _PROBE_MAX_REDIRECTS) as client:
            result = self._get(client, url, headers, timeout)

        header = result.body[:_PROBE_PREVIEW_BYTES].decode("utf-8", errors="replace")
        return ProbeResult(
            status=result.status,
            contentType=result.content_type or "unknown",
            contentLength=len(result.body),
            isPdf=header.startswith("%PDF"),
            headerPreview=header,
            redirects=result.redirected,
            finalUrl=result.final_url,
        )
