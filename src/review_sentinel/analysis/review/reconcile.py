"""Normalization of model and scanner output into ReviewIssue.

Model issues arrive as loosely-typed JSON; anything out of vocabulary is
coerced to a safe default rather than dropped, so the model's critique is
never silently lost. Entries that are not JSON objects are skipped.
"""

import math
from collections.abc import Sequence
from typing import Any

from loguru import logger

from ..models import Confidence, Exploitability, FileAnalysis, Severity
from .models import IssueOrigin, IssueType, ReviewIssue

# Common synonyms models use for issue categories
TYPE_ALIASES = {
    "style": IssueType.READABILITY,
    "quality": IssueType.READABILITY,
    "maintainability": IssueType.READABILITY,
    "bug": IssueType.LOGIC,
    "correctness": IssueType.LOGIC,
    "docs": IssueType.DOCUMENTATION,
    "test": IssueType.TESTING,
    "tests": IssueType.TESTING,
    "suggestion": IssueType.IMPROVEMENT,
    "architecture": IssueType.IMPROVEMENT,
    "vulnerability": IssueType.SECURITY,
}

SEVERITY_ALIASES = {
    "blocker": Severity.CRITICAL,
    "major": Severity.HIGH,
    "moderate": Severity.MEDIUM,
    "minor": Severity.LOW,
    "info": Severity.LOW,
    "informational": Severity.LOW,
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_type(value: Any) -> IssueType:
    raw = _text(value).lower()
    try:
        return IssueType(raw)
    except ValueError:
        return TYPE_ALIASES.get(raw, IssueType.IMPROVEMENT)


def _coerce_severity(value: Any) -> Severity:
    raw = _text(value).lower()
    try:
        return Severity(raw)
    except ValueError:
        return SEVERITY_ALIASES.get(raw, Severity.LOW)


def _coerce_confidence(value: Any) -> Confidence:
    try:
        return Confidence(_text(value).lower())
    except ValueError:
        return Confidence.MEDIUM


def _coerce_exploitability(value: Any) -> Exploitability:
    try:
        return Exploitability(_text(value).lower())
    except ValueError:
        return Exploitability.NONE


def _location(item: dict[str, Any]) -> str:
    location = _text(item.get("location"))
    if location:
        return location
    line = item.get("line") or item.get("line_number") or item.get("start_line")
    if line is not None and _text(line):
        return f"Line {_text(line)}"
    return "Location unknown"


def issue_from_model(item: dict[str, Any]) -> ReviewIssue:
    """Normalize one model-reported issue."""
    description = _text(item.get("description")) or _text(item.get("comment"))
    title = _text(item.get("title")) or description[:80] or "Untitled issue"
    filename = (
        _text(item.get("file"))
        or _text(item.get("filename"))
        or _text(item.get("file_path"))
        or "unknown"
    )
    cwe = _text(item.get("cwe")) or _text(item.get("cwe_id")) or None

    return ReviewIssue(
        type=_coerce_type(item.get("type") or item.get("category")),
        title=title,
        description=description or title,
        file=filename,
        location=_location(item),
        severity=_coerce_severity(item.get("severity")),
        cwe=cwe,
        confidence=_coerce_confidence(item.get("confidence")),
        exploitability=_coerce_exploitability(item.get("exploitability")),
        origin=IssueOrigin.MODEL,
    )


def model_issues(payload: dict[str, Any]) -> list[ReviewIssue]:
    """Normalize the ``issues`` array of a decoded model payload."""
    raw_issues = payload.get("issues")
    if not isinstance(raw_issues, list):
        if raw_issues is not None:
            logger.warning(
                f"Model 'issues' field is {type(raw_issues).__name__}, not a list; ignoring"
            )
        return []

    issues = []
    for item in raw_issues:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object model issue: {item!r}")
            continue
        issues.append(issue_from_model(item))
    return issues


def scanner_issues(analyses: Sequence[FileAnalysis]) -> list[ReviewIssue]:
    """One security issue per scanner finding, in file then finding order."""
    return [
        ReviewIssue.from_finding(finding, analysis.filename)
        for analysis in analyses
        for finding in analysis.vulnerabilities
    ]


def model_security_score(payload: dict[str, Any]) -> int | None:
    """The model's reported security score, if present, numeric and nonzero.

    Clamped to [0, 100]. Booleans and non-numeric strings are rejected.
    """
    value = payload.get("securityScore")
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(score) or score == 0:
        return None
    return max(0, min(100, int(round(score))))


def model_recommendations(payload: dict[str, Any]) -> list[str]:
    """Non-empty string recommendations from the payload."""
    raw = payload.get("recommendations")
    if not isinstance(raw, list):
        return []
    return [r.strip() for r in raw if isinstance(r, str) and r.strip()]
