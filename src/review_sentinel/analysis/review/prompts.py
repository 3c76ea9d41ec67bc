"""Review prompt construction.

The prompt is bounded in size: only the first ``max_files`` files are shown,
each with at most ``max_patch_chars`` characters of its diff. Static-analysis
results are summarized so the model can confirm, extend or contextualize them.

The output-format section is a contract with ``decoder.decode_response``:
the model is asked for one bare JSON object with ``issues``, ``summary``,
``securityScore`` and ``recommendations``.
"""

from collections.abc import Sequence

from ...config.defaults import (
    DEFAULT_MAX_HIGHLIGHTED_FINDINGS,
    DEFAULT_MAX_PATCH_CHARS,
    DEFAULT_MAX_PROMPT_FILES,
)
from ..models import FileAnalysis, Severity, SourceFile

PR_REVIEW_PROMPT = """You are an expert code reviewer and application security engineer reviewing a pull request.

## Commit Messages

{commit_messages}

## Changed Files

{file_sections}
{scanner_summary}
## Your Task

Review the changes for:
1. **Security**: injection, XSS, hardcoded secrets, unsafe deserialization, weak crypto
2. **Logic**: bugs, unhandled edge cases, race conditions
3. **Readability**: naming, structure, consistency
4. **Performance**: unnecessary work, inefficient loops or queries
5. **Documentation and testing**: missing docs, untested behavior
6. **Commit message quality**: clear, descriptive commit messages

Static analysis results above are hints: confirm, refine or dismiss them, and
report anything they missed.

## Output Format

Respond with a single JSON object and nothing else. Do not wrap it in
markdown code fences and do not add any text before or after it.
The object must match this schema:

{{
  "issues": [
    {{
      "type": "security | logic | readability | performance | documentation | testing | improvement",
      "title": "Short issue title",
      "description": "What is wrong and how to fix it",
      "file": "path/to/file.js",
      "location": "Line 42",
      "severity": "critical | high | medium | low",
      "cwe": "CWE-89 or null",
      "confidence": "high | medium | low",
      "exploitability": "high | medium | low | none"
    }}
  ],
  "summary": {{
    "total": 0,
    "bySeverity": {{"critical": 0, "high": 0, "medium": 0, "low": 0}}
  }},
  "securityScore": 0,
  "recommendations": ["Actionable recommendation"]
}}

`securityScore` is an integer from 0 (severely insecure) to 100 (no security concerns)."""

NO_FILES_TEXT = "No file changes were provided."
TRUNCATION_MARKER = "\n... (diff truncated) ..."


def _critical_labels(analysis: FileAnalysis) -> list[str]:
    labels: list[str] = []
    for finding in analysis.vulnerabilities:
        if finding.severity == Severity.CRITICAL and finding.vulnerability_type not in labels:
            labels.append(finding.vulnerability_type)
    return labels


def format_file_annotation(analysis: FileAnalysis) -> str:
    """One-line static-analysis note shown under a file's diff."""
    note = (
        f"**Static analysis**: {len(analysis.vulnerabilities)} potential issue(s), "
        f"complexity {analysis.complexity}"
    )
    critical = _critical_labels(analysis)
    if critical:
        note += f"; critical: {', '.join(critical)}"
    return note


def format_scanner_summary(
    analyses: Sequence[FileAnalysis],
    max_highlighted: int = DEFAULT_MAX_HIGHLIGHTED_FINDINGS,
) -> str:
    """Top-level static analysis block; empty when nothing was found."""
    with_findings = [a for a in analyses if a.vulnerabilities]
    if not with_findings:
        return ""

    lines = ["## Static Analysis Summary", ""]
    for analysis in with_findings:
        lines.append(f"- `{analysis.filename}`: {len(analysis.vulnerabilities)} finding(s)")

    highlighted = [
        (analysis.filename, finding)
        for analysis in with_findings
        for finding in analysis.vulnerabilities
        if finding.severity in (Severity.CRITICAL, Severity.HIGH)
    ][:max_highlighted]

    if highlighted:
        lines.append("")
        lines.append("**Critical and high severity findings:**")
        for i, (filename, finding) in enumerate(highlighted, 1):
            lines.append(
                f"{i}. [{finding.severity.value.upper()}] {finding.vulnerability_type} "
                f"in `{filename}` ({finding.location}): {finding.description}"
            )

    lines.append("")
    return "\n".join(lines)


def _format_file_section(
    source: SourceFile, analysis: FileAnalysis | None, max_patch_chars: int
) -> str:
    parts = [
        f"### File: {source.filename} ({source.status.value})",
        f"**Changes**: +{source.additions} -{source.deletions}",
        "",
    ]

    patch = source.patch or ""
    if patch:
        excerpt = patch[:max_patch_chars]
        if len(patch) > max_patch_chars:
            excerpt += TRUNCATION_MARKER
        parts.extend(["**Diff:**", excerpt])
    else:
        parts.append("(no diff available)")

    if analysis is not None and analysis.vulnerabilities:
        parts.extend(["", format_file_annotation(analysis)])

    parts.append("")
    return "\n".join(parts)


def build_prompt(
    commit_messages: str,
    files: Sequence[SourceFile],
    file_analyses: Sequence[FileAnalysis] | None = None,
    max_files: int = DEFAULT_MAX_PROMPT_FILES,
    max_patch_chars: int = DEFAULT_MAX_PATCH_CHARS,
    max_highlighted: int = DEFAULT_MAX_HIGHLIGHTED_FINDINGS,
) -> str:
    """Build the review prompt for a change set.

    Args:
        commit_messages: Commit messages of the change set, newline separated
        files: Changed files in input order
        file_analyses: Scanner results, matched to files by filename
        max_files: Maximum files included
        max_patch_chars: Maximum diff characters per file
        max_highlighted: Maximum critical/high findings listed in the summary

    Returns:
        Prompt text
    """
    analyses_by_file = {a.filename: a for a in file_analyses or ()}

    sections = [
        _format_file_section(source, analyses_by_file.get(source.filename), max_patch_chars)
        for source in list(files)[:max_files]
    ]
    if len(files) > max_files:
        sections.append(f"({len(files) - max_files} more file(s) not shown)\n")

    scanner_summary = format_scanner_summary(list(file_analyses or ()), max_highlighted)

    return PR_REVIEW_PROMPT.format(
        commit_messages=(commit_messages or "").strip() or "(no commit message)",
        file_sections="\n".join(sections) if sections else NO_FILES_TEXT,
        scanner_summary=f"\n{scanner_summary}" if scanner_summary else "",
    )
