"""
Tests for finding ordering.
"""

from tune_my_repos.models import (
    Finding,
    PriorityConfig,
    PriorityEntry,
    Severity,
    SortStrategy,
)
from tune_my_repos.prioritizer import sort_findings, top_findings


def _finding(title: str, severity: Severity) -> Finding:
    return Finding("governance", severity, title, "desc", "rec")


FINDINGS = [
    _finding("Missing pull request template", Severity.OPTIONAL),
    _finding("Missing CHANGELOG.md", Severity.RECOMMENDED),
    _finding("Missing SECURITY.md", Severity.IMPORTANT),
    _finding("Missing LICENSE", Severity.CRITICAL),
    _finding("Missing CONTRIBUTING.md", Severity.IMPORTANT),
]


def _titles(findings):
    return [f.title for f in findings]


def test_severity_order_without_config():
    assert _titles(sort_findings(FINDINGS)) == [
        "Missing LICENSE",
        "Missing SECURITY.md",
        "Missing CONTRIBUTING.md",
        "Missing CHANGELOG.md",
        "Missing pull request template",
    ]


def test_severity_strategy_ignores_priorities():
    config = PriorityConfig(
        entries=[PriorityEntry("Missing pull request template", 1)],
        sort_strategy=SortStrategy.SEVERITY,
    )
    assert sort_findings(FINDINGS, config) == sort_findings(FINDINGS)


def test_priority_strategy():
    """Priority 1 precedes priority 5, which precedes unlisted findings."""
    config = PriorityConfig(
        entries=[
            PriorityEntry("Missing CHANGELOG.md", 5),
            PriorityEntry("Missing pull request template", 1),
        ],
        sort_strategy=SortStrategy.PRIORITY,
    )

    assert _titles(sort_findings(FINDINGS, config)) == [
        "Missing pull request template",
        "Missing CHANGELOG.md",
        "Missing LICENSE",
        "Missing SECURITY.md",
        "Missing CONTRIBUTING.md",
    ]


def test_equal_priority_keeps_input_order():
    """Listed findings sharing a priority stay in input order, whatever their severity."""
    findings = [
        _finding("Missing pull request template", Severity.OPTIONAL),
        _finding("Missing LICENSE", Severity.CRITICAL),
    ]
    config = PriorityConfig(
        entries=[
            PriorityEntry("Missing pull request template", 1),
            PriorityEntry("Missing LICENSE", 1),
        ],
        sort_strategy=SortStrategy.PRIORITY,
    )

    assert _titles(sort_findings(findings, config)) == [
        "Missing pull request template",
        "Missing LICENSE",
    ]


def test_sort_is_deterministic_and_does_not_mutate():
    original = list(FINDINGS)
    config = PriorityConfig(sort_strategy=SortStrategy.PRIORITY)

    assert sort_findings(FINDINGS, config) == sort_findings(FINDINGS, config)
    assert FINDINGS == original


def test_top_findings_excludes_optional():
    config = PriorityConfig(
        entries=[PriorityEntry("Missing pull request template", 1)],
        top_count=2,
        sort_strategy=SortStrategy.PRIORITY,
    )

    assert _titles(top_findings(FINDINGS, config)) == [
        "Missing LICENSE",
        "Missing SECURITY.md",
    ]


def test_top_findings_optional_in_top():
    config = PriorityConfig(
        entries=[PriorityEntry("Missing pull request template", 1, optional_in_top=True)],
        top_count=2,
        sort_strategy=SortStrategy.PRIORITY,
    )

    assert _titles(top_findings(FINDINGS, config)) == [
        "Missing pull request template",
        "Missing LICENSE",
    ]


def test_top_findings_default_count():
    assert len(top_findings(FINDINGS)) == 3
