"""Review Sentinel - hybrid static + LLM review of pull request change sets."""

__version__ = "2.0.0"

from .core.exceptions import ReviewSentinelError

__all__ = ["ReviewSentinelError", "__version__"]
