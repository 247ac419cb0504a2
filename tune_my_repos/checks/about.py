"""About box metadata check (description, website, topics)."""

from tune_my_repos.checks.base import CheckContext, CheckOutcome, CheckSpec
from tune_my_repos.models import Finding, RepositoryMetadata, Severity


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def check_about_metadata(metadata: RepositoryMetadata) -> CheckOutcome:
    """
    Checks the repository About box.

    - Description: important (discoverability at a glance)
    - Website: recommended
    - Topics: recommended
    """
    findings = []

    if _is_blank(metadata.description):
        findings.append(
            Finding(
                category="documentation",
                severity=Severity.IMPORTANT,
                title="Missing repository description",
                description="Repository description helps users understand the project at a glance and improves discoverability",
                recommendation="Add a clear, concise description in the About section (Settings → Description)",
            )
        )

    if _is_blank(metadata.homepage):
        findings.append(
            Finding(
                category="documentation",
                severity=Severity.RECOMMENDED,
                title="Missing repository website",
                description="A website URL (documentation, demo, or project homepage) provides quick access to additional resources",
                recommendation="Add a website URL in the About section if documentation or demo site exists",
            )
        )

    if not metadata.topics:
        findings.append(
            Finding(
                category="documentation",
                severity=Severity.RECOMMENDED,
                title="Missing repository topics",
                description="Topics (tags) help users discover your repository through GitHub search and trending pages",
                recommendation="Add relevant topics in the About section (e.g., language, framework, domain keywords)",
            )
        )

    return CheckOutcome(findings=findings)


def _check(context: CheckContext) -> CheckOutcome:
    return check_about_metadata(context.metadata)


CHECK = CheckSpec(
    name="About Metadata", checker=_check, progress="Checking About box metadata..."
)
