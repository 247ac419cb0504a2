"""README presence check."""

from tune_my_repos.checks.base import CheckContext, CheckOutcome, CheckSpec
from tune_my_repos.models import FileTree, Finding, Severity

README_NAMES = {"readme.md", "readme.rst", "readme"}


def check_readme(files: FileTree) -> CheckOutcome:
    """
    Checks for a root README (README.md, README.rst or README, any case).
    """
    if any(path.lower() in README_NAMES for path in files.paths):
        return CheckOutcome()

    return CheckOutcome(
        findings=[
            Finding(
                category="documentation",
                severity=Severity.CRITICAL,
                title="Missing README",
                description="README is essential for communicating purpose, scope, and usage",
                recommendation="Create README.md or README.rst with purpose, audience, scope, and basic usage",
                automatable=True,
                time_estimate="1–3 hours",
            )
        ]
    )


def _check(context: CheckContext) -> CheckOutcome:
    return check_readme(context.files)


CHECK = CheckSpec(name="README", checker=_check, progress="Checking README quality...")
