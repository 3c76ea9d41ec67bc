"""Configuration for review-sentinel."""

from .settings import ReviewSettings

__all__ = ["ReviewSettings"]
