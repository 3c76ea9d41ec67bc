"""Tests for review prompt construction."""

from review_sentinel.analysis.models import (
    FileAnalysis,
    FileStatus,
    Severity,
    SourceFile,
    VulnerabilityFinding,
)
from review_sentinel.analysis.review.prompts import (
    NO_FILES_TEXT,
    TRUNCATION_MARKER,
    build_prompt,
    format_file_annotation,
    format_scanner_summary,
)


def _file(name, patch="@@ -1 +1 @@\n-a\n+b", status=FileStatus.MODIFIED):
    return SourceFile(filename=name, status=status, patch=patch, additions=1, deletions=1)


def _finding(severity, vuln_type="SQL Injection", location="Line 3, Column 2"):
    return VulnerabilityFinding(
        vulnerability_type=vuln_type,
        description=f"{vuln_type} found",
        location=location,
        severity=severity,
    )


class TestBuildPrompt:
    """Prompt contents and size bounds."""

    def test_contains_commit_messages_and_diff(self):
        prompt = build_prompt("Fix login\nAdd tests", [_file("src/login.js")])

        assert "Fix login\nAdd tests" in prompt
        assert "### File: src/login.js (modified)" in prompt
        assert "**Changes**: +1 -1" in prompt
        assert "+b" in prompt

    def test_output_schema_is_requested(self):
        prompt = build_prompt("msg", [_file("a.js")])

        for key in ('"issues"', '"summary"', '"securityScore"', '"recommendations"'):
            assert key in prompt
        assert "Do not wrap it in" in prompt

    def test_only_first_files_included(self):
        files = [_file(f"src/f{i}.js") for i in range(12)]

        prompt = build_prompt("msg", files, max_files=10)

        assert "src/f9.js" in prompt
        assert "src/f10.js" not in prompt
        assert "(2 more file(s) not shown)" in prompt

    def test_patch_truncated(self):
        patch = "+" + "x" * 3000

        prompt = build_prompt("msg", [_file("big.js", patch=patch)], max_patch_chars=2000)

        assert "x" * 1999 in prompt
        assert "x" * 2001 not in prompt
        assert TRUNCATION_MARKER.strip() in prompt

    def test_short_patch_not_marked(self):
        prompt = build_prompt("msg", [_file("small.js")])

        assert TRUNCATION_MARKER.strip() not in prompt

    def test_missing_patch(self):
        prompt = build_prompt("msg", [_file("bin.js", patch="")])

        assert "(no diff available)" in prompt

    def test_no_files(self):
        prompt = build_prompt("msg", [])

        assert NO_FILES_TEXT in prompt

    def test_empty_commit_messages(self):
        assert "(no commit message)" in build_prompt("", [_file("a.js")])
        assert "(no commit message)" in build_prompt(None, [_file("a.js")])

    def test_scanner_annotations(self):
        analysis = FileAnalysis(
            filename="src/db.js",
            vulnerabilities=(_finding(Severity.CRITICAL),),
            complexity=3,
        )

        prompt = build_prompt("msg", [_file("src/db.js")], [analysis])

        assert "## Static Analysis Summary" in prompt
        assert "**Static analysis**: 1 potential issue(s), complexity 3" in prompt
        assert "critical: SQL Injection" in prompt

    def test_no_summary_without_findings(self):
        analysis = FileAnalysis(filename="src/ok.js", complexity=1)

        prompt = build_prompt("msg", [_file("src/ok.js")], [analysis])

        assert "Static Analysis Summary" not in prompt
        assert "**Static analysis**" not in prompt

    def test_braces_in_diff_survive_formatting(self):
        prompt = build_prompt("msg", [_file("a.js", patch="+const o = {a: 1};")])

        assert "+const o = {a: 1};" in prompt


class TestScannerSummary:
    """Top-level static analysis block."""

    def test_highlights_capped(self):
        findings = tuple(_finding(Severity.HIGH, location=f"Line {i}, Column 0") for i in range(8))
        analysis = FileAnalysis(filename="src/a.js", vulnerabilities=findings)

        summary = format_scanner_summary([analysis], max_highlighted=5)

        assert "- `src/a.js`: 8 finding(s)" in summary
        assert "5. [HIGH]" in summary
        assert "6. [HIGH]" not in summary

    def test_medium_findings_not_highlighted(self):
        analysis = FileAnalysis(
            filename="src/a.js",
            vulnerabilities=(_finding(Severity.MEDIUM, "Weak Cryptography"),),
        )

        summary = format_scanner_summary([analysis])

        assert "1 finding(s)" in summary
        assert "Critical and high severity findings" not in summary

    def test_annotation_lists_critical_classes_once(self):
        analysis = FileAnalysis(
            filename="src/a.js",
            vulnerabilities=(
                _finding(Severity.CRITICAL, "SQL Injection"),
                _finding(Severity.CRITICAL, "SQL Injection"),
                _finding(Severity.CRITICAL, "Command Injection"),
                _finding(Severity.HIGH, "Prototype Pollution"),
            ),
            complexity=2,
        )

        note = format_file_annotation(analysis)

        assert note.endswith("critical: SQL Injection, Command Injection")
