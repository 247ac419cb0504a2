"""CI workflow presence check."""

from tune_my_repos.checks.base import CheckContext, CheckOutcome, CheckSpec
from tune_my_repos.models import FileTree, Finding, Severity

WORKFLOWS_PREFIX = ".github/workflows/"


def check_ci_workflows(files: FileTree) -> CheckOutcome:
    """
    Checks for GitHub Actions workflow files.

    Only presence is verified; workflow contents and run results are not.
    """
    if files.has_prefix(WORKFLOWS_PREFIX):
        return CheckOutcome()

    return CheckOutcome(
        findings=[
            Finding(
                category="testing",
                severity=Severity.IMPORTANT,
                title="No CI/CD workflows detected",
                description="Automated testing and quality checks reduce bugs and improve confidence",
                recommendation="Add GitHub Actions workflow for tests, linting, and security scanning",
                time_estimate="1–3 hours",
            )
        ]
    )


def _check(context: CheckContext) -> CheckOutcome:
    return check_ci_workflows(context.files)


CHECK = CheckSpec(
    name="CI Workflows", checker=_check, progress="Checking CI/CD workflows..."
)
