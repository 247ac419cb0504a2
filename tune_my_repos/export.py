"""
Report exports (JSON, Markdown, CSV) and remediation action links.
"""

import csv
import io
import json
from datetime import datetime
from typing import NamedTuple

from tune_my_repos.models import AnalysisResult, Finding, Severity, count_by_severity

CSV_HEADER = [
    "Repository",
    "Classification",
    "Maturity",
    "Fork",
    "Critical",
    "Important",
    "Recommended",
    "Optional",
]

CODE_OF_CONDUCT_TEMPLATE = (
    "https://www.contributor-covenant.org/version/2/1/code_of_conduct/"
)
CONTRIBUTING_GUIDE = (
    "https://docs.github.com/en/communities/setting-up-your-project-for-healthy-"
    "contributions/setting-guidelines-for-repository-contributors"
)

SECURITY_PROMPT = """Create a SECURITY.md file for {repository} that includes:
- Supported versions
- How to report vulnerabilities
- Security update process
- Contact information"""

CONTRIBUTING_PROMPT = """Create a comprehensive CONTRIBUTING.md file for the {repository} repository that includes:
- How to set up the development environment
- Coding standards and style guidelines
- How to submit changes (pull request process)
- How to report bugs and request features
- Testing requirements
- Code review process
- Community guidelines and communication channels

Tailor the content to match the project type and tech stack. Make it welcoming and clear for new contributors."""


class ActionLink(NamedTuple):
    """A one-click remediation: a URL, a prompt to paste into an assistant, or both."""

    label: str
    url: str | None = None
    prompt: str | None = None


def get_action_link(finding: Finding, repository: str) -> ActionLink | None:
    """
    Look up the remediation shortcut for a finding.

    Args:
        finding: The finding.
        repository: "owner/repo".

    Returns:
        ActionLink, or None when the finding has no shortcut.
    """
    title = finding.title
    if title == "Missing LICENSE":
        return ActionLink(
            "Add License Now",
            url=f"https://github.com/{repository}/community/license/new?branch=main",
        )
    if title == "Missing CODE_OF_CONDUCT.md":
        return ActionLink("Get Template", url=CODE_OF_CONDUCT_TEMPLATE)
    if title == "Missing SECURITY.md":
        return ActionLink(
            "Copy Prompt", prompt=SECURITY_PROMPT.format(repository=repository)
        )
    if title == "Missing CONTRIBUTING.md":
        return ActionLink(
            "View Guide",
            url=CONTRIBUTING_GUIDE,
            prompt=CONTRIBUTING_PROMPT.format(repository=repository),
        )
    if title == "Missing README":
        return ActionLink(
            "Create README",
            url=f"https://github.com/{repository}/new/main?filename=README.md",
        )
    if title == "Missing CHANGELOG.md":
        return ActionLink(
            "Create Changelog",
            url=f"https://github.com/{repository}/new/main?filename=CHANGELOG.md",
        )
    return None


def export_json(results: list[AnalysisResult]) -> str:
    return json.dumps(
        [result.to_dict() for result in results], indent=2, ensure_ascii=False
    )


def export_csv(results: list[AnalysisResult]) -> str:
    """One row per repository with finding counts by severity."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    buffer.write(",".join(CSV_HEADER) + "\n")
    for result in results:
        counts = count_by_severity(result.findings)
        writer.writerow(
            [
                result.repository.full_name,
                result.classification.value,
                result.maturity_level.value,
                str(result.fork.is_fork).lower(),
                *(counts[severity.value] for severity in Severity),
            ]
        )
    return buffer.getvalue()


def export_markdown(
    results: list[AnalysisResult], generated_at: datetime | None = None
) -> str:
    """
    Render a Markdown report.

    Each repository gets its classification, maturity, fork flag and its
    findings with recommendations and action links.
    """
    generated_at = generated_at or datetime.now()
    lines = [
        "# Repository Analysis Report",
        "",
        f"**Analyzed:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Total Repositories:** {len(results)}",
        "",
    ]

    for result in results:
        repository = result.repository.full_name
        lines.extend(
            [
                f"## {repository}",
                "",
                f"- **Classification:** {result.classification.value}",
                f"- **Maturity:** {result.maturity_level.value}",
                f"- **Fork:** {str(result.fork.is_fork).lower()}",
                "",
            ]
        )

        if result.findings:
            lines.append(f"### Issues ({len(result.findings)})")
            lines.append("")
            for finding in result.findings:
                line = (
                    f"- **{finding.title}** ({finding.severity.value}): "
                    f"{finding.recommendation}"
                )
                action = get_action_link(finding, repository)
                if action is not None and action.url:
                    line += f" [{action.label}]({action.url})"
                lines.append(line)
            lines.append("")

        if result.limitations:
            lines.append("### Limitations")
            lines.append("")
            lines.extend(f"- {note}" for note in result.limitations)
            lines.append("")

    lines.extend(["---", "*Generated by tune-my-repos*", ""])
    return "\n".join(lines)


EXPORTERS = {
    "json": export_json,
    "markdown": export_markdown,
    "csv": export_csv,
}
