"""Text-level security checks that need no syntax tree.

Two groups:
    - TEXTUAL_CHECKS run over every scanned file, whether or not it parsed.
    - REGEX_FALLBACK_RULES replace the structural catalog when a file cannot
      be parsed (or has no grammar). Their findings carry coarse locations
      and assume worst-case exploitability.
"""

import re
from dataclasses import dataclass

from ..models import Confidence, Exploitability, Severity, VulnerabilityFinding

LOG_CALL_RE = re.compile(
    r"(?:console\.(?:log|info|debug|warn|error)|\bprint|logger\.\w+|logging\.\w+)\s*\("
    r".*(?:password|token|key|secret)",
    re.IGNORECASE,
)
PLAIN_HTTP_RE = re.compile(r"http://(?!localhost|127\.0\.0\.1)", re.IGNORECASE)
WEAK_HASH_RE = re.compile(r"\b(?:md5|sha1)\b", re.IGNORECASE)


@dataclass(frozen=True)
class TextualCheck:
    """A whole-file check yielding at most one finding."""

    name: str
    regex: re.Pattern[str]
    vulnerability_type: str
    description: str
    location: str
    severity: Severity
    cwe: str
    exploitability: Exploitability


@dataclass(frozen=True)
class RegexRule:
    """A fallback rule used when no syntax tree is available."""

    name: str
    regex: re.Pattern[str]
    vulnerability_type: str
    severity: Severity
    cwe: str


TEXTUAL_CHECKS: tuple[TextualCheck, ...] = (
    TextualCheck(
        name="sensitiveLogging",
        regex=LOG_CALL_RE,
        vulnerability_type="Information Disclosure",
        description="Sensitive information may be logged to console",
        location="console.log statements",
        severity=Severity.MEDIUM,
        cwe="CWE-532",
        exploitability=Exploitability.LOW,
    ),
    TextualCheck(
        name="plaintextHttp",
        regex=PLAIN_HTTP_RE,
        vulnerability_type="Insecure Communication",
        description="HTTP protocol used instead of HTTPS",
        location="HTTP URLs",
        severity=Severity.MEDIUM,
        cwe="CWE-319",
        exploitability=Exploitability.MEDIUM,
    ),
    TextualCheck(
        name="weakHash",
        regex=WEAK_HASH_RE,
        vulnerability_type="Weak Cryptography",
        description="Weak cryptographic hash algorithm detected",
        location="Cryptographic functions",
        severity=Severity.MEDIUM,
        cwe="CWE-327",
        exploitability=Exploitability.MEDIUM,
    ),
)

REGEX_FALLBACK_RULES: tuple[RegexRule, ...] = (
    RegexRule(
        name="hardcodedPassword",
        regex=re.compile(r"password\s*[:=]\s*[\"'][^\"']+[\"']", re.IGNORECASE),
        vulnerability_type="Hardcoded Credentials",
        severity=Severity.HIGH,
        cwe="CWE-798",
    ),
    RegexRule(
        name="hardcodedApiKey",
        regex=re.compile(r"api[_-]?key\s*[:=]\s*[\"'][^\"']+[\"']", re.IGNORECASE),
        vulnerability_type="Hardcoded API Key",
        severity=Severity.HIGH,
        cwe="CWE-798",
    ),
    RegexRule(
        name="codeInjection",
        regex=re.compile(r"eval\s*\(", re.IGNORECASE),
        vulnerability_type="Code Injection",
        severity=Severity.CRITICAL,
        cwe="CWE-95",
    ),
)


def run_textual_checks(content: str) -> list[VulnerabilityFinding]:
    """Apply every textual check; one finding per check that fires."""
    findings = []
    for check in TEXTUAL_CHECKS:
        if check.regex.search(content):
            findings.append(
                VulnerabilityFinding(
                    vulnerability_type=check.vulnerability_type,
                    description=check.description,
                    location=check.location,
                    severity=check.severity,
                    confidence=Confidence.MEDIUM,
                    exploitability=check.exploitability,
                    cwe=check.cwe,
                    pattern=check.name,
                )
            )
    return findings


def run_regex_fallback(content: str, filename: str) -> list[VulnerabilityFinding]:
    """Apply the fallback table; one finding per rule, however many matches."""
    findings = []
    for rule in REGEX_FALLBACK_RULES:
        if rule.regex.search(content):
            findings.append(
                VulnerabilityFinding(
                    vulnerability_type=rule.vulnerability_type,
                    description=f"{rule.vulnerability_type} detected in {filename}",
                    location="Multiple locations",
                    severity=rule.severity,
                    confidence=Confidence.LOW,
                    exploitability=Exploitability.HIGH,
                    cwe=rule.cwe,
                    pattern=rule.name,
                )
            )
    return findings
