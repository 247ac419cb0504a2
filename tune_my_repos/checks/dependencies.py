"""Dependency manifest detection."""

from tune_my_repos.checks.base import CheckContext, CheckOutcome, CheckSpec
from tune_my_repos.models import FileTree

# Root manifest -> package manager label
DEPENDENCY_MANIFESTS = {
    "package.json": "npm",
    "requirements.txt": "pip",
    "pyproject.toml": "python",
    "Gemfile": "bundler",
    "go.mod": "go",
    "Cargo.toml": "cargo",
}


def check_dependencies(files: FileTree) -> CheckOutcome:
    """
    Records which package ecosystems are present.

    Vulnerability scanning is not performed, so a detected manifest is
    reported as a limitation rather than a finding.
    """
    found = [label for manifest, label in DEPENDENCY_MANIFESTS.items() if manifest in files]
    if not found:
        return CheckOutcome()

    return CheckOutcome(
        limitations=[
            f"Dependency vulnerability scanning for {', '.join(found)} requires package analysis"
        ]
    )


def _check(context: CheckContext) -> CheckOutcome:
    return check_dependencies(context.files)


CHECK = CheckSpec(
    name="Dependencies", checker=_check, progress="Checking dependencies..."
)
