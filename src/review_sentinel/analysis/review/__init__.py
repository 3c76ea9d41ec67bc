"""Hybrid code review: static findings reconciled with an LLM critique.

Key Components:
- ReviewOrchestrator: scan → prompt → model → decode → merge/fallback → score
- decode_response: ordered cascade recovering JSON from raw model output
- security_score / overall_score: deterministic bounded scores
- AnalysisResult: the single output handed to persistence

Usage:
    from review_sentinel.analysis.review import ReviewOrchestrator
    from review_sentinel.core.llm_client import LLMClient

    orchestrator = ReviewOrchestrator(LLMClient())
    result = await orchestrator.analyze(files, commit_messages)

    for issue in result.issues:
        print(f"{issue.severity.value}: {issue.title}")
"""

from .decoder import DecodedResponse, decode_response
from .models import (
    AnalysisResult,
    AnalysisStatus,
    IssueOrigin,
    IssueSummary,
    IssueType,
    ReviewIssue,
)
from .orchestrator import ReviewOrchestrator
from .prompts import build_prompt
from .scoring import overall_score, security_score, synthesize_recommendations

__all__ = [
    "AnalysisResult",
    "AnalysisStatus",
    "DecodedResponse",
    "IssueOrigin",
    "IssueSummary",
    "IssueType",
    "ReviewIssue",
    "ReviewOrchestrator",
    "build_prompt",
    "decode_response",
    "overall_score",
    "security_score",
    "synthesize_recommendations",
]
