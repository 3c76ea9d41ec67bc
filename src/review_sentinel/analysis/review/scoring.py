"""Deterministic scoring of review results.

All functions here are pure: the same issues and findings always produce the
same scores. Call them with the final merged issue list.

Security score penalties apply to model security issues *and* to scanner
findings. A scanner finding merged into the issue list is therefore penalized
twice (once per schedule); the lower per-finding weights keep that from
dominating the score.
"""

from collections.abc import Iterable, Sequence

from ...config.defaults import LOW_COMPLEXITY_THRESHOLD, MAX_RECOMMENDATIONS
from ..models import Severity, VulnerabilityFinding
from .models import IssueType, ReviewIssue

SECURITY_ISSUE_PENALTIES = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}
SECURITY_FINDING_PENALTIES = {
    Severity.CRITICAL: 20,
    Severity.HIGH: 12,
    Severity.MEDIUM: 6,
    Severity.LOW: 2,
}
OVERALL_ISSUE_PENALTIES = {
    Severity.CRITICAL: 15,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}
OVERALL_FINDING_PENALTIES = {
    Severity.CRITICAL: 15,
    Severity.HIGH: 10,
}
LOW_COMPLEXITY_BONUS = 5

# Remediation advice per vulnerability class
RECOMMENDATIONS_BY_TYPE = {
    "SQL Injection": "Use parameterized queries or prepared statements instead of building SQL from strings.",
    "Command Injection": "Avoid shell execution with user input; use argument arrays and strict allow-lists.",
    "Cross-Site Scripting (XSS)": "Sanitize user-controlled data and prefer safe rendering APIs over raw HTML injection.",
    "Hardcoded Credentials": "Move credentials to environment variables or a secrets manager and rotate the exposed values.",
    "Hardcoded API Key": "Move API keys to environment variables or a secrets manager and rotate the exposed keys.",
    "Weak Random Number Generation": "Use a cryptographically secure generator (e.g. crypto.randomBytes) for security-sensitive values.",
    "Prototype Pollution": "Validate object keys and avoid merging untrusted objects into shared prototypes.",
    "Insecure Deserialization": "Validate and schema-check untrusted input before deserializing it; never eval data.",
    "Code Injection": "Remove eval-style dynamic code execution and parse data with safe parsers.",
    "Information Disclosure": "Strip secrets and personal data from log statements.",
    "Insecure Communication": "Use HTTPS for all external endpoints.",
    "Weak Cryptography": "Replace MD5/SHA-1 with SHA-256 or stronger; use bcrypt/argon2 for passwords.",
}

URGENCY_LINES = {
    Severity.CRITICAL: "Address {count} critical security finding(s) before merging.",
    Severity.HIGH: "Review and fix {count} high-severity security finding(s).",
}


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def security_score(
    issues: Iterable[ReviewIssue], vulnerabilities: Iterable[VulnerabilityFinding]
) -> int:
    """Security score in [0, 100]; 100 means nothing found."""
    score = 100
    for issue in issues:
        if issue.type == IssueType.SECURITY:
            score -= SECURITY_ISSUE_PENALTIES.get(issue.severity, 0)
    for finding in vulnerabilities:
        score -= SECURITY_FINDING_PENALTIES.get(finding.severity, 0)
    return _clamp(score)


def overall_score(
    issues: Iterable[ReviewIssue],
    vulnerabilities: Iterable[VulnerabilityFinding],
    complexity: int | None,
    low_complexity_threshold: int = LOW_COMPLEXITY_THRESHOLD,
) -> int:
    """Overall quality score in [0, 100].

    Args:
        issues: Final merged issue list
        vulnerabilities: Scanner findings
        complexity: Aggregate complexity of scanned files (None if nothing scanned)
        low_complexity_threshold: Complexity below which the bonus applies
    """
    score = 100
    for issue in issues:
        score -= OVERALL_ISSUE_PENALTIES.get(issue.severity, 0)
    for finding in vulnerabilities:
        score -= OVERALL_FINDING_PENALTIES.get(finding.severity, 0)
    if complexity is not None and complexity < low_complexity_threshold:
        score += LOW_COMPLEXITY_BONUS
    return _clamp(score)


def aggregate_complexity(complexities: Sequence[int]) -> int | None:
    """Mean per-file complexity, rounded half up; None for no files."""
    if not complexities:
        return None
    return int(sum(complexities) / len(complexities) + 0.5)


def synthesize_recommendations(
    vulnerabilities: Sequence[VulnerabilityFinding],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[str]:
    """Recommendation lines for the scanner-only path.

    Urgency lines for critical and high tiers come first, then one line per
    distinct vulnerability class in first-seen order. Classes without a
    known recommendation contribute nothing.
    """
    lines = []

    for severity, template in URGENCY_LINES.items():
        count = sum(1 for v in vulnerabilities if v.severity == severity)
        if count:
            lines.append(template.format(count=count))

    seen: set[str] = set()
    for finding in vulnerabilities:
        if finding.vulnerability_type in seen:
            continue
        seen.add(finding.vulnerability_type)
        text = RECOMMENDATIONS_BY_TYPE.get(finding.vulnerability_type)
        if text:
            lines.append(text)

    return lines[:limit]
