"""Governance file check (LICENSE, CONTRIBUTING.md, SECURITY.md, ...)."""

from typing import NamedTuple

from tune_my_repos.checks.base import CheckContext, CheckOutcome, CheckSpec
from tune_my_repos.models import FileTree, Finding, Severity


class GovernanceFile(NamedTuple):
    filename: str
    severity: Severity
    purpose: str
    risk: str
    template_url: str | None = None


GOVERNANCE_FILES = [
    GovernanceFile(
        "LICENSE",
        Severity.CRITICAL,
        "usage rights and legal terms",
        "Legal uncertainty, unclear usage rights, potential compliance violations",
    ),
    GovernanceFile(
        "CONTRIBUTING.md",
        Severity.IMPORTANT,
        "contribution process",
        "Contributors lack guidance, inconsistent contributions, review friction",
    ),
    GovernanceFile(
        "CODE_OF_CONDUCT.md",
        Severity.RECOMMENDED,
        "community standards",
        "No community standards, potential for unaddressed harassment",
    ),
    GovernanceFile(
        "SECURITY.md",
        Severity.IMPORTANT,
        "vulnerability reporting",
        "Security researchers lack reporting channel, delayed vulnerability disclosure",
    ),
    GovernanceFile(
        "CHANGELOG.md",
        Severity.RECOMMENDED,
        "change tracking",
        "Users cannot track changes, difficult to assess upgrade impact",
    ),
    GovernanceFile(
        "ACCESSIBILITY.md",
        Severity.RECOMMENDED,
        "accessibility commitment and transparency",
        "No accessibility transparency, unclear WCAG conformance, potential barriers for disabled users",
        "https://github.com/mgifford/ACCESSIBILITY.md",
    ),
    GovernanceFile(
        "SUSTAINABILITY.md",
        Severity.OPTIONAL,
        "digital sustainability and environmental impact",
        "No sustainability policy, unclear environmental impact, missed opportunity for carbon reduction",
        "https://github.com/mgifford/SUSTAINABILITY.md",
    ),
]

# Files an agent can draft without project-specific knowledge
AUTOMATABLE_FILES = {"SECURITY.md", "CONTRIBUTING.md"}


def missing_file_finding(spec: GovernanceFile) -> Finding:
    recommendation = f"Add {spec.filename} (or .rst equivalent) to clarify {spec.purpose}"
    if spec.template_url:
        recommendation += f". Template: {spec.template_url}"

    return Finding(
        category="governance",
        severity=spec.severity,
        title=f"Missing {spec.filename}",
        description=spec.risk,
        recommendation=recommendation,
        automatable=spec.filename in AUTOMATABLE_FILES,
        time_estimate="1–3 hours" if spec.filename == "LICENSE" else "15–45 minutes",
        requires_write_access=True,
    )


def check_governance_files(context: CheckContext) -> CheckOutcome:
    """
    Checks presence of each governance file.

    A file counts as present under any name variant (see
    FileTree.governance_variants). Absent files provided by the owner's
    `.github` repository become limitation notes instead of findings.
    """
    findings = []
    limitations = []

    for spec in GOVERNANCE_FILES:
        if context.files.contains_any(FileTree.governance_variants(spec.filename)):
            continue

        inherited = (
            context.has_org_github
            and context.org is not None
            and context.org.file_exists_in_org_github(context.owner, spec.filename)
        )
        if inherited:
            limitations.append(
                f"{spec.filename} inherited from organization-level "
                f"{context.org.org_github_url(context.owner)}"
            )
        else:
            findings.append(missing_file_finding(spec))

    return CheckOutcome(findings, limitations)


CHECK = CheckSpec(
    name="Governance Files",
    checker=check_governance_files,
    progress="Checking governance files (LICENSE, CONTRIBUTING, etc.)...",
)
