"""Data structures shared by the scanner and the review pipeline.

Design Philosophy:
    - Inputs (SourceFile) and scanner output (VulnerabilityFinding, CodeMetrics,
      FileAnalysis) are frozen dataclasses, created once per run
    - String enums so values serialize directly to JSON
    - Every structure exposes ``to_dict()`` for the persistence collaborator
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Severity level of a finding or issue."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Confidence(str, Enum):
    """How sure the detector is that the finding is real."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Exploitability(str, Enum):
    """How readily a finding can be exploited."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class FileStatus(str, Enum):
    """Change status of a file in the change set."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"


# Exploitability of a structural match, derived from its severity
EXPLOITABILITY_BY_SEVERITY = {
    Severity.CRITICAL: Exploitability.HIGH,
    Severity.HIGH: Exploitability.MEDIUM,
    Severity.MEDIUM: Exploitability.LOW,
    Severity.LOW: Exploitability.NONE,
}


@dataclass(frozen=True)
class SourceFile:
    """A single changed file, with its content already fetched.

    Attributes:
        filename: Path of the file relative to the repository root
        status: Change status (added, modified, removed, renamed)
        content: Full post-change text (None when not retrievable)
        patch: Unified diff hunk text for this file
        additions: Number of lines added
        deletions: Number of lines removed
    """

    filename: str
    status: FileStatus = FileStatus.MODIFIED
    content: str | None = None
    patch: str = ""
    additions: int = 0
    deletions: int = 0

    @classmethod
    def from_github(cls, entry: dict[str, Any], content: str | None) -> SourceFile:
        """Build from one entry of GitHub's "list pull request files" response.

        Unknown status values (e.g. "copied", "changed") map to MODIFIED.

        Args:
            entry: Raw file entry (``filename``, ``status``, ``patch``, ...)
            content: Decoded file content fetched by the caller, if any
        """
        try:
            status = FileStatus(entry.get("status", "modified"))
        except ValueError:
            status = FileStatus.MODIFIED

        return cls(
            filename=entry["filename"],
            status=status,
            content=content,
            patch=entry.get("patch") or "",
            additions=int(entry.get("additions") or 0),
            deletions=int(entry.get("deletions") or 0),
        )


@dataclass(frozen=True)
class VulnerabilityFinding:
    """A single scanner-detected potential vulnerability."""

    vulnerability_type: str  # e.g. "SQL Injection", "Hardcoded Credentials"
    description: str
    location: str  # "Line 12, Column 4" or a coarse label
    severity: Severity
    confidence: Confidence = Confidence.HIGH
    exploitability: Exploitability = Exploitability.MEDIUM
    cwe: str | None = None
    pattern: str = ""  # catalog key or heuristic name that produced the match

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.vulnerability_type,
            "description": self.description,
            "location": self.location,
            "severity": self.severity.value,
            "confidence": self.confidence.value,
            "exploitability": self.exploitability.value,
            "cwe": self.cwe,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class CodeMetrics:
    """Size and shape counters collected while walking a syntax tree.

    Attributes:
        functions: Function-like constructs (declarations, arrows, methods)
        loops: for / for-in / while / do-while statements
        conditions: if statements and non-default switch cases
        depth: Maximum nesting depth of functions, loops and branches
        lines_of_code: Physical lines in the file
    """

    functions: int = 0
    loops: int = 0
    conditions: int = 0
    depth: int = 0
    lines_of_code: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "functions": self.functions,
            "loops": self.loops,
            "conditions": self.conditions,
            "depth": self.depth,
            "lines_of_code": self.lines_of_code,
        }


@dataclass(frozen=True)
class FileAnalysis:
    """Scanner output for one file."""

    filename: str
    vulnerabilities: tuple[VulnerabilityFinding, ...] = ()
    complexity: int = 0
    metrics: CodeMetrics = field(default_factory=CodeMetrics)
    language: str | None = None
    syntax_tree_analyzed: bool = False
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def empty(cls, filename: str, language: str | None = None) -> FileAnalysis:
        """Zero findings, zero complexity, zero metrics."""
        return cls(filename=filename, language=language)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.filename,
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "complexity": self.complexity,
            "metrics": self.metrics.to_dict(),
            "language": self.language,
            "syntax_tree_analyzed": self.syntax_tree_analyzed,
            "analysis_timestamp": self.analyzed_at.isoformat(),
        }
