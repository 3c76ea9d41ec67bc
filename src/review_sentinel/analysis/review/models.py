"""Data structures for the merged review result.

``AnalysisResult`` is the only output of the pipeline and is handed whole to
the persistence layer. Its ``summary`` is a computed property so it can never
disagree with the issue list.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ...config.defaults import ANALYSIS_VERSION
from ..models import (
    Confidence,
    Exploitability,
    FileAnalysis,
    Severity,
    VulnerabilityFinding,
)


class IssueType(str, Enum):
    """Category of a review issue."""

    READABILITY = "readability"
    LOGIC = "logic"
    SECURITY = "security"
    PERFORMANCE = "performance"
    DOCUMENTATION = "documentation"
    TESTING = "testing"
    IMPROVEMENT = "improvement"


class IssueOrigin(str, Enum):
    """Which detector produced an issue."""

    MODEL = "model"
    SCANNER = "scanner"
    HYBRID = "hybrid"


class AnalysisStatus(str, Enum):
    """Caller-visible outcome of a run.

    - completed: model path succeeded, or fallback produced scanner issues
    - degraded: fallback path with nothing to report
    - failed: unexpected fault; result is empty but well-formed
    """

    COMPLETED = "completed"
    DEGRADED = "degraded"
    FAILED = "failed"


# Weights for AnalysisResult.risk_score()
RISK_WEIGHTS = {
    Severity.CRITICAL: 10,
    Severity.HIGH: 7,
    Severity.MEDIUM: 4,
    Severity.LOW: 1,
}


@dataclass(frozen=True)
class ReviewIssue:
    """One review item, from the model, the scanner, or both."""

    type: IssueType
    title: str
    description: str
    file: str
    location: str
    severity: Severity
    cwe: str | None = None
    confidence: Confidence = Confidence.MEDIUM
    exploitability: Exploitability = Exploitability.NONE
    origin: IssueOrigin = IssueOrigin.MODEL

    @classmethod
    def from_finding(cls, finding: VulnerabilityFinding, filename: str) -> ReviewIssue:
        """Normalize a scanner finding; scanner issues are always security issues."""
        return cls(
            type=IssueType.SECURITY,
            title=finding.vulnerability_type,
            description=finding.description,
            file=filename,
            location=finding.location,
            severity=finding.severity,
            cwe=finding.cwe,
            confidence=finding.confidence,
            exploitability=finding.exploitability,
            origin=IssueOrigin.SCANNER,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "file": self.file,
            "location": self.location,
            "severity": self.severity.value,
            "cwe": self.cwe,
            "confidence": self.confidence.value,
            "exploitability": self.exploitability.value,
            "origin": self.origin.value,
        }


@dataclass(frozen=True)
class IssueSummary:
    """Counts derived from an issue sequence. Every enum member is present."""

    total: int
    by_severity: dict[str, int]
    by_type: dict[str, int]
    by_origin: dict[str, int]

    @classmethod
    def from_issues(cls, issues: list[ReviewIssue]) -> IssueSummary:
        severity_counts = Counter(issue.severity for issue in issues)
        type_counts = Counter(issue.type for issue in issues)
        origin_counts = Counter(issue.origin for issue in issues)
        return cls(
            total=len(issues),
            by_severity={s.value: severity_counts.get(s, 0) for s in Severity},
            by_type={t.value: type_counts.get(t, 0) for t in IssueType},
            by_origin={o.value: origin_counts.get(o, 0) for o in IssueOrigin},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_severity": dict(self.by_severity),
            "by_type": dict(self.by_type),
            "by_origin": dict(self.by_origin),
        }


@dataclass
class PerformanceMetrics:
    """Wall-clock timings (milliseconds) and memory delta (MB) of one run."""

    scan_ms: float = 0.0
    model_ms: float = 0.0
    total_ms: float = 0.0
    memory_delta_mb: float = 0.0

    @property
    def breakdown(self) -> dict[str, float]:
        """Share of total time spent scanning, waiting on the model, and elsewhere."""
        if self.total_ms <= 0:
            return {"scan_pct": 0.0, "model_pct": 0.0, "other_pct": 0.0}
        scan_pct = round(self.scan_ms / self.total_ms * 100, 1)
        model_pct = round(self.model_ms / self.total_ms * 100, 1)
        other_pct = round(max(0.0, 100.0 - scan_pct - model_pct), 1)
        return {"scan_pct": scan_pct, "model_pct": model_pct, "other_pct": other_pct}

    def to_dict(self) -> dict[str, Any]:
        return {
            "scan_ms": round(self.scan_ms, 2),
            "model_ms": round(self.model_ms, 2),
            "total_ms": round(self.total_ms, 2),
            "memory_delta_mb": round(self.memory_delta_mb, 2),
            "breakdown": self.breakdown,
        }


@dataclass
class AnalysisMetadata:
    """Provenance of a run."""

    files_analyzed: int = 0
    syntax_tree_analysis_performed: bool = False
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    analysis_version: str = ANALYSIS_VERSION
    model: str = "unknown"
    code_file_types: list[str] = field(default_factory=list)
    decode_strategy: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_analyzed": self.files_analyzed,
            "syntax_tree_analysis_performed": self.syntax_tree_analysis_performed,
            "analysis_timestamp": self.analyzed_at.isoformat(),
            "analysis_version": self.analysis_version,
            "model": self.model,
            "code_file_types": list(self.code_file_types),
            "decode_strategy": self.decode_strategy,
        }


@dataclass
class AnalysisResult:
    """Complete output of one analysis run.

    Fields are filled in as pipeline stages complete; ``summary`` is always
    recomputed from ``issues``.
    """

    issues: list[ReviewIssue] = field(default_factory=list)
    file_analyses: list[FileAnalysis] = field(default_factory=list)
    security_score: int = 100
    overall_score: int = 100
    recommendations: list[str] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    metadata: AnalysisMetadata = field(default_factory=AnalysisMetadata)
    status: AnalysisStatus = AnalysisStatus.COMPLETED
    error: str | None = None
    review_turn: int | None = None

    @property
    def summary(self) -> IssueSummary:
        return IssueSummary.from_issues(self.issues)

    @property
    def vulnerabilities(self) -> list[VulnerabilityFinding]:
        """All scanner findings across files, in file order."""
        return [v for analysis in self.file_analyses for v in analysis.vulnerabilities]

    @property
    def is_fallback(self) -> bool:
        return self.error is not None and self.status != AnalysisStatus.FAILED

    def risk_score(self) -> int:
        """Weighted severity roll-up of the issue list, capped at 100."""
        summary = self.summary
        raw = sum(
            summary.by_severity[severity.value] * weight
            for severity, weight in RISK_WEIGHTS.items()
        )
        return min(100, raw)

    def top_cwes(self, limit: int = 5) -> list[dict[str, Any]]:
        """Most frequent CWEs across issues and scanner findings."""
        counts = Counter(i.cwe for i in self.issues if i.cwe)
        counts.update(v.cwe for v in self.vulnerabilities if v.cwe)
        return [{"cwe": cwe, "count": n} for cwe, n in counts.most_common(limit)]

    def security_summary(self) -> dict[str, Any]:
        """Security-focused view of the result."""
        security_issues = [i for i in self.issues if i.type == IssueType.SECURITY]
        return {
            "total_security_issues": len(security_issues),
            "total_scanner_vulnerabilities": len(self.vulnerabilities),
            "critical_security_issues": sum(
                1 for i in security_issues if i.severity == Severity.CRITICAL
            ),
            "high_security_issues": sum(
                1 for i in security_issues if i.severity == Severity.HIGH
            ),
            "security_score": self.security_score,
            "risk_score": self.risk_score(),
            "top_cwes": self.top_cwes(),
        }

    def to_dict(self) -> dict[str, Any]:
        """Lossless JSON-compatible representation for storage."""
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": self.summary.to_dict(),
            "file_analyses": [analysis.to_dict() for analysis in self.file_analyses],
            "security_score": self.security_score,
            "overall_score": self.overall_score,
            "recommendations": list(self.recommendations),
            "performance": self.performance.to_dict(),
            "metadata": self.metadata.to_dict(),
            "status": self.status.value,
            "error": self.error,
            "review_turn": self.review_turn,
        }
