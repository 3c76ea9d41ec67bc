"""Core functionality for review-sentinel."""

from .exceptions import (
    ConfigError,
    ModelCallError,
    ParsingError,
    ResponseDecodeError,
    ReviewSentinelError,
    ScanError,
)

__all__ = [
    "ConfigError",
    "ModelCallError",
    "ParsingError",
    "ResponseDecodeError",
    "ReviewSentinelError",
    "ScanError",
]
