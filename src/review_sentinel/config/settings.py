"""Runtime settings for the review pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from ..core.exceptions import ConfigError
from .defaults import (
    CODE_FILE_EXTENSIONS,
    DEFAULT_MAX_HIGHLIGHTED_FINDINGS,
    DEFAULT_MAX_PATCH_CHARS,
    DEFAULT_MAX_PROMPT_FILES,
    LOW_COMPLEXITY_THRESHOLD,
    MAX_RECOMMENDATIONS,
)

# Environment variable -> settings attribute (all integers)
_ENV_OVERRIDES = {
    "REVIEW_SENTINEL_MAX_FILES": "max_prompt_files",
    "REVIEW_SENTINEL_MAX_PATCH_CHARS": "max_patch_chars",
}


@dataclass
class ReviewSettings:
    """Tunable limits for prompt construction and scoring.

    Attributes:
        max_prompt_files: Files included in the review prompt (input order)
        max_patch_chars: Characters of each file's patch sent to the model
        max_highlighted_findings: Critical/high findings listed in the prompt summary
        low_complexity_threshold: Average complexity below which the overall
            score earns its bonus
        max_recommendations: Cap on synthesized recommendation lines
        code_extensions: Extensions eligible for static scanning
        model: Optional model override passed to the LLM client
    """

    max_prompt_files: int = DEFAULT_MAX_PROMPT_FILES
    max_patch_chars: int = DEFAULT_MAX_PATCH_CHARS
    max_highlighted_findings: int = DEFAULT_MAX_HIGHLIGHTED_FINDINGS
    low_complexity_threshold: int = LOW_COMPLEXITY_THRESHOLD
    max_recommendations: int = MAX_RECOMMENDATIONS
    code_extensions: list[str] = field(
        default_factory=lambda: list(CODE_FILE_EXTENSIONS)
    )
    model: str | None = None

    def __post_init__(self) -> None:
        for name in (
            "max_prompt_files",
            "max_patch_chars",
            "max_highlighted_findings",
            "max_recommendations",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(
                    f"{name} must be non-negative", {"value": getattr(self, name)}
                )
        self.code_extensions = [ext.lower() for ext in self.code_extensions]

    @classmethod
    def load(cls, path: Path) -> ReviewSettings:
        """Load settings from a YAML file, then apply environment overrides.

        A missing file yields defaults (plus environment overrides).

        Raises:
            ConfigError: If the file is not valid YAML or has unknown keys
        """
        data: dict[str, Any] = {}
        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid settings file {path}: {e}") from e

        settings = cls.from_dict(data)
        settings.apply_env_overrides()
        return settings

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewSettings:
        """Create settings from a dictionary.

        Raises:
            ConfigError: On unknown keys
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigError(
                f"Unknown settings keys: {', '.join(sorted(unknown))}",
                {"unknown": sorted(unknown)},
            )
        return cls(**data)

    def apply_env_overrides(self) -> None:
        """Apply ``REVIEW_SENTINEL_*`` environment overrides in place."""
        for env_var, attr in _ENV_OVERRIDES.items():
            raw = os.environ.get(env_var)
            if not raw:
                continue
            try:
                value = int(raw)
                if value < 0:
                    raise ValueError(raw)
            except ValueError:
                logger.warning(f"Invalid {env_var} value: {raw}, using {attr} default")
                continue
            setattr(self, attr, value)
            logger.debug(f"{attr} from environment: {value} ({env_var})")

        env_model = os.environ.get("REVIEW_SENTINEL_MODEL")
        if env_model:
            self.model = env_model

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "max_prompt_files": self.max_prompt_files,
            "max_patch_chars": self.max_patch_chars,
            "max_highlighted_findings": self.max_highlighted_findings,
            "low_complexity_threshold": self.low_complexity_threshold,
            "max_recommendations": self.max_recommendations,
            "code_extensions": list(self.code_extensions),
            "model": self.model,
        }

    def save(self, path: Path) -> None:
        """Save settings to a YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def is_code_file(self, filename: str) -> bool:
        """Return True if ``filename`` has a scannable extension."""
        suffix = Path(filename).suffix.lower()
        return bool(suffix) and suffix in self.code_extensions
