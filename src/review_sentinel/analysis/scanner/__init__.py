"""Static security scanner.

Parses JavaScript/TypeScript with tree-sitter, matches a catalog of
vulnerability shapes against the syntax tree, and falls back to regex rules
for files that cannot be parsed.

Usage:
    from review_sentinel.analysis.scanner import SyntaxScanner

    analysis = SyntaxScanner().scan(content, "src/db.js")
    for finding in analysis.vulnerabilities:
        print(f"{finding.severity.value}: {finding.vulnerability_type}")
"""

from .catalog import SECURITY_CATALOG, CatalogEntry
from .heuristics import REGEX_FALLBACK_RULES, TEXTUAL_CHECKS
from .scanner import SyntaxScanner, detect_language

__all__ = [
    "CatalogEntry",
    "REGEX_FALLBACK_RULES",
    "SECURITY_CATALOG",
    "SyntaxScanner",
    "TEXTUAL_CHECKS",
    "detect_language",
]
