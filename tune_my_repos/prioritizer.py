"""
Finding ordering for display.
"""

from tune_my_repos.config import DEFAULT_TOP_COUNT
from tune_my_repos.models import Finding, PriorityConfig, Severity, SortStrategy


def _severity_key(finding: Finding) -> int:
    return finding.severity.rank


def sort_findings(
    findings: list[Finding], config: PriorityConfig | None = None
) -> list[Finding]:
    """
    Order findings deterministically.

    Without a config, or with sort_strategy "severity", findings are sorted by
    severity rank (critical first). With sort_strategy "priority", findings
    listed in the priority table come first in ascending priority; unlisted
    findings follow, ordered by severity. The sort is stable, so ties keep
    their input order.

    Args:
        findings: Findings of one repository.
        config: Optional priority table.

    Returns:
        A new, sorted list.
    """
    if config is None or config.sort_strategy is SortStrategy.SEVERITY:
        return sorted(findings, key=_severity_key)

    def priority_key(finding: Finding) -> tuple[int, int, int]:
        entry = config.entry_for(finding.title)
        if entry is None:
            return (1, 0, finding.severity.rank)
        return (0, entry.priority, 0)

    return sorted(findings, key=priority_key)


def top_findings(
    findings: list[Finding], config: PriorityConfig | None = None
) -> list[Finding]:
    """
    Pick the headline findings for a repository.

    Optional-severity findings are left out unless their priority entry sets
    optional_in_top.
    """
    top_count = config.top_count if config is not None else DEFAULT_TOP_COUNT

    def eligible(finding: Finding) -> bool:
        if finding.severity is not Severity.OPTIONAL:
            return True
        entry = config.entry_for(finding.title) if config is not None else None
        return entry is not None and entry.optional_in_top

    return [f for f in sort_findings(findings, config) if eligible(f)][:top_count]
