"""Tests for deterministic security/overall scoring."""

from review_sentinel.analysis.models import Severity, VulnerabilityFinding
from review_sentinel.analysis.review.models import IssueType, ReviewIssue
from review_sentinel.analysis.review.scoring import (
    aggregate_complexity,
    overall_score,
    security_score,
    synthesize_recommendations,
)


def _finding(severity=Severity.HIGH, vuln_type="Hardcoded Credentials"):
    return VulnerabilityFinding(
        vulnerability_type=vuln_type,
        description="desc",
        location="Line 1, Column 0",
        severity=severity,
    )


def _issue(severity=Severity.MEDIUM, issue_type=IssueType.LOGIC):
    return ReviewIssue(
        type=issue_type,
        title="Issue",
        description="desc",
        file="src/a.js",
        location="Line 1",
        severity=severity,
    )


class TestSecurityScore:
    """security_score penalties and bounds."""

    def test_nothing_found(self):
        assert security_score([], []) == 100

    def test_scanner_finding_merged_as_issue_is_penalized_twice(self):
        finding = _finding(Severity.HIGH)
        issue = ReviewIssue.from_finding(finding, "src/login.js")

        # 15 for the security issue, 12 for the finding
        assert security_score([issue], [finding]) == 73

    def test_non_security_issues_do_not_count(self):
        issues = [_issue(Severity.CRITICAL, IssueType.LOGIC)] * 3

        assert security_score(issues, []) == 100

    def test_issue_penalties(self):
        issues = [
            _issue(Severity.CRITICAL, IssueType.SECURITY),
            _issue(Severity.HIGH, IssueType.SECURITY),
            _issue(Severity.MEDIUM, IssueType.SECURITY),
            _issue(Severity.LOW, IssueType.SECURITY),
        ]

        assert security_score(issues, []) == 100 - 25 - 15 - 8 - 3

    def test_finding_penalties(self):
        findings = [_finding(s) for s in Severity]

        assert security_score([], findings) == 100 - 20 - 12 - 6 - 2

    def test_clamped_at_zero(self):
        findings = [_finding(Severity.CRITICAL)] * 10

        assert security_score([], findings) == 0


class TestOverallScore:
    """overall_score penalties, bonus and bounds."""

    def test_clean_low_complexity_is_capped(self):
        assert overall_score([], [], complexity=3) == 100

    def test_bonus_offsets_penalty(self):
        assert overall_score([_issue(Severity.MEDIUM)], [], complexity=3) == 100

    def test_no_bonus_at_threshold(self):
        assert overall_score([_issue(Severity.HIGH)], [], complexity=10) == 90

    def test_no_bonus_without_scanned_files(self):
        assert overall_score([_issue(Severity.HIGH)], [], complexity=None) == 90

    def test_every_issue_type_counts(self):
        issues = [
            _issue(Severity.LOW, IssueType.DOCUMENTATION),
            _issue(Severity.LOW, IssueType.SECURITY),
        ]

        assert overall_score(issues, [], complexity=None) == 96

    def test_only_critical_and_high_findings_count(self):
        findings = [_finding(s) for s in Severity]

        assert overall_score([], findings, complexity=None) == 100 - 15 - 10

    def test_custom_threshold(self):
        issues = [_issue(Severity.HIGH)]

        assert overall_score(issues, [], complexity=12, low_complexity_threshold=20) == 95

    def test_clamped_at_zero(self):
        issues = [_issue(Severity.CRITICAL)] * 10

        assert overall_score(issues, [], complexity=1) == 0

    def test_deterministic(self):
        issues = [_issue(Severity.HIGH, IssueType.SECURITY), _issue(Severity.LOW)]
        findings = [_finding(Severity.CRITICAL)]

        first = (security_score(issues, findings), overall_score(issues, findings, 4))
        second = (security_score(issues, findings), overall_score(issues, findings, 4))

        assert first == second


class TestAggregateComplexity:
    """Mean complexity across scanned files."""

    def test_empty(self):
        assert aggregate_complexity([]) is None

    def test_rounds_half_up(self):
        assert aggregate_complexity([1, 2]) == 2
        assert aggregate_complexity([1, 1, 2]) == 1

    def test_zero(self):
        assert aggregate_complexity([0, 0]) == 0


class TestSynthesizeRecommendations:
    """Scanner-only recommendation lines."""

    def test_no_findings(self):
        assert synthesize_recommendations([]) == []

    def test_urgency_lines_first(self):
        findings = [
            _finding(Severity.MEDIUM, "Weak Random Number Generation"),
            _finding(Severity.CRITICAL, "SQL Injection"),
            _finding(Severity.HIGH, "Hardcoded Credentials"),
        ]

        lines = synthesize_recommendations(findings)

        assert lines[0].startswith("Address 1 critical")
        assert lines[1].startswith("Review and fix 1 high-severity")
        assert "crypto.randomBytes" in lines[2]
        assert "parameterized queries" in lines[3]
        assert "secrets manager" in lines[4]

    def test_distinct_classes_only(self):
        findings = [_finding(Severity.MEDIUM, "Weak Random Number Generation")] * 3

        assert len(synthesize_recommendations(findings)) == 1

    def test_unknown_class_contributes_nothing(self):
        findings = [_finding(Severity.LOW, "Something Novel")]

        assert synthesize_recommendations(findings) == []

    def test_limit(self):
        findings = [
            _finding(Severity.CRITICAL, "SQL Injection"),
            _finding(Severity.CRITICAL, "Command Injection"),
            _finding(Severity.HIGH, "Prototype Pollution"),
        ]

        assert len(synthesize_recommendations(findings, limit=2)) == 2
