"""
ISIN Parser — pulls ISO 6166 security codes out of PDF-extracted text.

PDF text extraction routinely breaks codes apart (hard line wraps, stray
spaces between glyph runs), so the scan runs twice:

  1. on the text with every whitespace run collapsed to a single space
  2. on the text with all whitespace removed

and the union of both passes is re-validated against the full anchored rule.

Validation is structural only (2 letters, 9 alphanumerics, 1 digit). The check
digit is NOT verified, so a well-shaped but numerically invalid code is kept.
"""

import re

from schemas import ExtractionResult

# No \b anchors: word boundaries misfire next to the punctuation PDF text is full of.
ISIN_PATTERN = re.compile(r"[A-Z]{2}[A-Z0-9]{9}[0-9]")

# Diagnostics only — never part of the result
_ISIN_LIKE = re.compile(r"[A-Z]{2}[A-Z0-9]{9,11}")
_UPPERCASE_RUN = re.compile(r"[A-Z]{2}[A-Z0-9]+")

_WHITESPACE = re.compile(r"\s+")


def is_valid_isin(candidate: str) -> bool:
    """True when ``candidate`` is exactly one structurally valid ISIN."""
    return (
        isinstance(candidate, str)
        and len(candidate) == 12
        and ISIN_PATTERN.fullmatch(candidate) is not None
    )


def extract_isins(text: str) -> list[str]:
    """Return every unique ISIN in ``text``, sorted ascending.

    Never raises; empty or non-string input yields an empty list.
    """
    if not text or not isinstance(text, str):
        return []

    normalized = _WHITESPACE.sub(" ", text)
    stripped = _WHITESPACE.sub("", text)

    candidates = ISIN_PATTERN.findall(normalized) + ISIN_PATTERN.findall(stripped)
    return sorted({c for c in candidates if is_valid_isin(c)})


def build_extraction_result(text: str) -> ExtractionResult:
    return ExtractionResult.from_isins(extract_isins(text))


def find_isin_like(text: str, limit: int = 20) -> list[str]:
    """Runs that look ISIN-ish (12–14 chars), for logging near misses."""
    return _ISIN_LIKE.findall(text or "")[:limit]


def find_uppercase_runs(text: str, limit: int = 30) -> list[str]:
    """Any uppercase/digit run starting with two letters, for logging when nothing matched."""
    return _UPPERCASE_RUN.findall(text or "")[:limit]
