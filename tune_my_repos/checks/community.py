"""Community file check (issue templates, pull request template)."""

from tune_my_repos.checks.base import CheckContext, CheckOutcome, CheckSpec
from tune_my_repos.models import FileTree, Finding, Severity

ISSUE_TEMPLATE_PREFIX = ".github/ISSUE_TEMPLATE/"
PR_TEMPLATES = (
    ".github/PULL_REQUEST_TEMPLATE.md",
    ".github/pull_request_template.md",
    ".github/PULL_REQUEST_TEMPLATE.rst",
    ".github/pull_request_template.rst",
)


def check_community_files(files: FileTree) -> CheckOutcome:
    findings = []

    if not files.has_prefix(ISSUE_TEMPLATE_PREFIX):
        findings.append(
            Finding(
                category="documentation",
                severity=Severity.RECOMMENDED,
                title="Missing issue templates",
                description="Issue templates guide contributors and improve issue quality",
                recommendation="Add issue templates for bug reports and feature requests",
                automatable=True,
            )
        )

    if not files.contains_any(PR_TEMPLATES):
        findings.append(
            Finding(
                category="documentation",
                severity=Severity.OPTIONAL,
                title="Missing pull request template",
                description="PR templates ensure consistent, complete pull requests",
                recommendation="Add .github/PULL_REQUEST_TEMPLATE.md with checklist",
                automatable=True,
            )
        )

    return CheckOutcome(findings=findings)


def _check(context: CheckContext) -> CheckOutcome:
    return check_community_files(context.files)


CHECK = CheckSpec(
    name="Community Files",
    checker=_check,
    progress="Checking community health files...",
)
