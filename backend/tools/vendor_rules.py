"""
Vendor rules — hard-coded rewrites for document viewers that wrap a PDF.

Each rule knows how to recognise one vendor's preview URL, where the direct
download most likely lives, and a short list of alternative locations to try
once everything else has failed. New vendors are added by appending to
VENDOR_RULES; the fetch loop never changes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class VendorRule:
    name: str
    host: str
    id_pattern: re.Pattern
    direct_template: str
    alternative_templates: tuple[str, ...] = field(default_factory=tuple)

    def document_id(self, url: str) -> Optional[str]:
        if self.host not in url:
            return None
        match = self.id_pattern.search(url)
        return match.group(1) if match else None

    def matches(self, url: str) -> bool:
        return self.document_id(url) is not None

    def direct_url(self, url: str) -> Optional[str]:
        doc_id = self.document_id(url)
        return self.direct_template.format(id=doc_id) if doc_id else None

    def alternatives(self, url: str) -> list[str]:
        doc_id = self.document_id(url)
        if not doc_id:
            return []
        return [template.format(id=doc_id) for template in self.alternative_templates]


_CACORP = "https://www.credit-agricole.com/content/dam/cacorp/pdf"

VENDOR_RULES: list[VendorRule] = [
    VendorRule(
        name="credit_agricole_preview",
        host="credit-agricole.com",
        id_pattern=re.compile(r"/pdfPreview/(\d+)"),
        direct_template=_CACORP + "/en/{id}.pdf",
        alternative_templates=(
            _CACORP + "/en/{id}.pdf",
            _CACORP + "/fr/{id}.pdf",
            _CACORP + "/{id}.pdf",
            "https://www.credit-agricole.com/pdf/{id}.pdf",
        ),
    ),
]


def match_vendor_rules(url: str, rules: Optional[list[VendorRule]] = None) -> list[VendorRule]:
    """Rules whose preview pattern matches ``url``, in table order."""
    return [rule for rule in (rules if rules is not None else VENDOR_RULES) if rule.matches(url)]
