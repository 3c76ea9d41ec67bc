"""Typed exception hierarchy for review-sentinel.

Hierarchy
---------
ReviewSentinelError (base)
├── ScanError              – static scanner failures
│   └── ParsingError       – source could not be turned into a syntax tree
├── ModelCallError         – text-generation model request failed or timed out
├── ResponseDecodeError    – no structured payload recoverable from model output
└── ConfigError            – configuration / validation errors

None of these escape ``ReviewOrchestrator.analyze()``: parsing errors are
recovered inside the scanner, model and decode errors push the run onto the
scanner-only fallback path.
"""

from typing import Any


class ReviewSentinelError(Exception):
    """Base exception for review-sentinel."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


# ── Scanner layer ───────────────────────────────────────────────────────


class ScanError(ReviewSentinelError):
    """Static analysis of a single file failed."""

    pass


class ParsingError(ScanError):
    """Source text could not be parsed into a usable syntax tree."""

    pass


# ── Model layer ─────────────────────────────────────────────────────────


class ModelCallError(ReviewSentinelError):
    """Request to the text-generation model failed.

    Raised by ``LLMClient.generate()`` on timeouts, HTTP errors and malformed
    API envelopes.
    """

    pass


class ResponseDecodeError(ReviewSentinelError):
    """Every decode strategy failed on the model's reply.

    ``context["strategy"]`` names the last strategy tried and
    ``context["attempts"]`` maps each strategy to its error message.
    """

    pass


# ── Configuration layer ─────────────────────────────────────────────────


class ConfigError(ReviewSentinelError):
    """Configuration / validation errors."""

    pass
