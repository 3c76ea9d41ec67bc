"""Review orchestration: scan, prompt, model call, decode, merge, score.

Pipeline:
1. Filter changed files to scannable source files with content
2. Scan each file concurrently (worker threads, no shared state)
3. Build a size-bounded prompt from commit messages, diffs and findings
4. Call the model once (no retry)
5. Decode the reply; merge model and scanner issues
6. On model or decode failure, fall back to scanner-only results
7. Score and attach performance metrics

``analyze()`` never raises: every path returns a schema-complete
``AnalysisResult``, with ``error`` set when the run degraded or failed.
"""

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from loguru import logger

from ...config.settings import ReviewSettings
from ...core.exceptions import ResponseDecodeError
from ...core.llm_client import LLMClient
from ...core.metrics import RunTimer
from ..models import FileAnalysis, FileStatus, SourceFile
from ..scanner import SyntaxScanner
from .decoder import DecodedResponse, decode_response
from .models import AnalysisResult, AnalysisStatus, PerformanceMetrics
from .prompts import build_prompt
from .reconcile import (
    model_issues,
    model_recommendations,
    model_security_score,
    scanner_issues,
)
from .scoring import (
    aggregate_complexity,
    overall_score,
    security_score,
    synthesize_recommendations,
)


class ModelClient(Protocol):
    """What the orchestrator needs from a text-generation model."""

    model: str

    async def generate(self, prompt: str) -> str: ...


class ReviewOrchestrator:
    """Runs the hybrid static + LLM review of one change set.

    Holds configuration only; all per-run state lives on the call stack, so
    a run can be abandoned mid-flight (e.g. by a request deadline) without
    side effects.

    Example:
        >>> orchestrator = ReviewOrchestrator(LLMClient())
        >>> result = await orchestrator.analyze(files, "Fix login flow")
        >>> result.security_score, result.summary.total
    """

    def __init__(
        self,
        llm_client: ModelClient,
        scanner: SyntaxScanner | None = None,
        settings: ReviewSettings | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            llm_client: Model client exposing ``model`` and ``async generate(prompt)``
            scanner: Static scanner (default: SyntaxScanner with the built-in catalog)
            settings: Prompt and scoring limits (default: ReviewSettings())
        """
        self.llm_client = llm_client
        self.scanner = scanner or SyntaxScanner()
        self.settings = settings or ReviewSettings()

    @classmethod
    def from_settings(cls, settings: ReviewSettings | None = None) -> "ReviewOrchestrator":
        """Orchestrator backed by a live LLMClient honoring ``settings.model``.

        Raises:
            ValueError: If no model provider API key is configured
        """
        settings = settings or ReviewSettings()
        return cls(LLMClient(model=settings.model), settings=settings)

    async def analyze(
        self,
        files: Sequence[SourceFile],
        commit_messages: str,
        review_turn: int | None = None,
    ) -> AnalysisResult:
        """Analyze a change set.

        Args:
            files: Changed files with content already fetched
            commit_messages: Commit messages of the change set
            review_turn: Opaque sequence number supplied by the persistence layer

        Returns:
            AnalysisResult (never raises)
        """
        timer = RunTimer()
        result = AnalysisResult(review_turn=review_turn)
        result.metadata.model = getattr(self.llm_client, "model", None) or "unknown"
        files = list(files or [])

        logger.info(f"Starting analysis of {len(files)} changed file(s)")

        try:
            await self._run(files, commit_messages, result, timer)
        except Exception as e:
            logger.exception(f"Analysis failed unexpectedly: {e}")
            result.issues = []
            result.security_score = 0
            result.overall_score = 0
            result.recommendations = []
            result.status = AnalysisStatus.FAILED
            result.error = f"Analysis failed: {e}"

        result.performance = PerformanceMetrics(
            scan_ms=timer.elapsed_ms("scan"),
            model_ms=timer.elapsed_ms("model"),
            total_ms=timer.elapsed_ms(),
            memory_delta_mb=timer.memory_delta_mb(),
        )

        logger.info(
            f"Analysis {result.status.value}: {result.summary.total} issue(s), "
            f"security {result.security_score}, overall {result.overall_score} "
            f"in {result.performance.total_ms:.0f}ms"
        )
        return result

    async def _run(
        self,
        files: list[SourceFile],
        commit_messages: str,
        result: AnalysisResult,
        timer: RunTimer,
    ) -> None:
        malformed = [f for f in files if not isinstance(f, SourceFile)]
        if malformed:
            logger.warning(f"Ignoring {len(malformed)} malformed file record(s)")
            files = [f for f in files if isinstance(f, SourceFile)]

        eligible = self._eligible_files(files)
        result.metadata.files_analyzed = len(eligible)
        result.metadata.code_file_types = sorted(
            {Path(f.filename).suffix.lower() for f in eligible}
        )

        with timer.phase("scan"):
            analyses = await self._scan_files(eligible)
        result.file_analyses = analyses
        result.metadata.syntax_tree_analysis_performed = any(
            a.syntax_tree_analyzed for a in analyses
        )
        logger.info(
            f"Scanned {len(analyses)} file(s): "
            f"{len(result.vulnerabilities)} static finding(s)"
        )

        prompt = build_prompt(
            commit_messages,
            files,
            analyses,
            max_files=self.settings.max_prompt_files,
            max_patch_chars=self.settings.max_patch_chars,
            max_highlighted=self.settings.max_highlighted_findings,
        )

        try:
            with timer.phase("model"):
                raw_text = await self.llm_client.generate(prompt)
        except Exception as e:
            logger.warning(f"Model call failed, using static analysis only: {e}")
            self._apply_fallback(result, f"Model call failed: {e}")
        else:
            try:
                decoded = decode_response(raw_text)
            except ResponseDecodeError as e:
                logger.warning(f"{e}; using static analysis only")
                self._apply_fallback(result, str(e))
            else:
                self._apply_model_result(result, decoded)

        complexity = aggregate_complexity([a.complexity for a in analyses])
        result.overall_score = overall_score(
            result.issues,
            result.vulnerabilities,
            complexity,
            self.settings.low_complexity_threshold,
        )

    def _eligible_files(self, files: list[SourceFile]) -> list[SourceFile]:
        """Files that still exist, have text content and a code extension."""
        eligible = []
        for source in files:
            if source.status == FileStatus.REMOVED:
                continue
            if not isinstance(source.content, str):
                logger.debug(f"Skipping {source.filename}: no content")
                continue
            if not self.settings.is_code_file(source.filename):
                logger.debug(f"Skipping {source.filename}: not a code file")
                continue
            eligible.append(source)
        return eligible

    async def _scan_files(self, files: list[SourceFile]) -> list[FileAnalysis]:
        return list(await asyncio.gather(*(self._scan_file(f) for f in files)))

    async def _scan_file(self, source: SourceFile) -> FileAnalysis:
        try:
            return await asyncio.to_thread(
                self.scanner.scan, source.content, source.filename
            )
        except Exception as e:
            logger.warning(f"Scan of {source.filename} failed, no findings kept: {e}")
            return FileAnalysis.empty(source.filename)

    def _apply_model_result(
        self, result: AnalysisResult, decoded: DecodedResponse
    ) -> None:
        """Merge model issues with scanner issues (model first)."""
        payload = decoded.payload
        findings = result.vulnerabilities

        result.issues = model_issues(payload) + scanner_issues(result.file_analyses)
        result.metadata.decode_strategy = decoded.strategy

        reported = model_security_score(payload)
        result.security_score = (
            reported
            if reported is not None
            else security_score(result.issues, findings)
        )
        result.recommendations = model_recommendations(
            payload
        ) or synthesize_recommendations(findings, self.settings.max_recommendations)
        result.status = AnalysisStatus.COMPLETED

        logger.info(
            f"Merged {result.summary.by_origin['model']} model issue(s) "
            f"(decoded via '{decoded.strategy}') with "
            f"{result.summary.by_origin['scanner']} scanner issue(s)"
        )

    def _apply_fallback(self, result: AnalysisResult, reason: str) -> None:
        """Scanner-only result; degraded when there is nothing to report."""
        findings = result.vulnerabilities

        result.issues = scanner_issues(result.file_analyses)
        result.security_score = security_score(result.issues, findings)
        result.recommendations = synthesize_recommendations(
            findings, self.settings.max_recommendations
        )
        result.error = reason
        result.status = (
            AnalysisStatus.COMPLETED if result.issues else AnalysisStatus.DEGRADED
        )
