"""Change-set analysis: static scanning and model-assisted review.

Key Components:
    - SourceFile: one changed file with its fetched content
    - VulnerabilityFinding / FileAnalysis: scanner output
    - scanner.SyntaxScanner: syntax-tree + regex vulnerability scanner
    - review.ReviewOrchestrator: end-to-end hybrid review pipeline
"""

from .models import (
    CodeMetrics,
    Confidence,
    Exploitability,
    FileAnalysis,
    FileStatus,
    Severity,
    SourceFile,
    VulnerabilityFinding,
)

__all__ = [
    "CodeMetrics",
    "Confidence",
    "Exploitability",
    "FileAnalysis",
    "FileStatus",
    "Severity",
    "SourceFile",
    "VulnerabilityFinding",
]
