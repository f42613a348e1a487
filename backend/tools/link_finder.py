"""
Link Finder — locate a PDF link inside an HTML landing page.

Rules are evaluated in priority order and the first one that matches wins.
Each rule is a named regex with a single capture group, so each can be tested
on its own.
"""

from __future__ import annotations

import re
from typing import Iterator, NamedTuple, Optional
from urllib.parse import urlsplit


class LinkRule(NamedTuple):
    name: str
    pattern: re.Pattern


LINK_RULES: list[LinkRule] = [
    LinkRule("href", re.compile(r"""href=["']([^"']*\.pdf[^"']*)["']""", re.IGNORECASE)),
    LinkRule("src", re.compile(r"""src=["']([^"']*\.pdf[^"']*)["']""", re.IGNORECASE)),
    LinkRule("css_url", re.compile(r"""url\(["']?([^"')]*\.pdf[^"')]*)["']?\)""", re.IGNORECASE)),
    LinkRule("pdf_path", re.compile(r"""["']([^"']*/pdf/[^"']*)["']""", re.IGNORECASE)),
    LinkRule("file_path", re.compile(r"""["']([^"']*/file/[^"']*\.pdf[^"']*)["']""", re.IGNORECASE)),
]


def iter_pdf_links(html: str, rules: Optional[list[LinkRule]] = None) -> Iterator[tuple[str, str]]:
    """Yield (rule_name, raw_link) for the first match of each rule, in priority order."""
    for rule in rules if rules is not None else LINK_RULES:
        match = rule.pattern.search(html)
        if match:
            yield rule.name, match.group(1)


def find_pdf_link(html: str, rules: Optional[list[LinkRule]] = None) -> Optional[tuple[str, str]]:
    """Return the highest-priority (rule_name, raw_link), or None."""
    return next(iter_pdf_links(html, rules), None)


def resolve_link(base_url: str, link: str) -> str:
    """Make ``link`` absolute against ``base_url``.

    Absolute links are returned untouched. Root-relative links are joined to the
    base origin; path-relative ones to the base path minus its last segment.

    Raises ValueError when the base URL has no scheme or host.
    """
    if link.startswith("http"):
        return link

    base = urlsplit(base_url)
    if not base.scheme or not base.netloc:
        raise ValueError(f"Cannot resolve {link!r} against {base_url!r}")

    if link.startswith("//"):
        return f"{base.scheme}:{link}"

    origin = f"{base.scheme}://{base.netloc}"
    if link.startswith("/"):
        return f"{origin}{link}"

    directory = base.path[: base.path.rfind("/")] if "/" in base.path else ""
    return f"{origin}{directory}/{link}"
