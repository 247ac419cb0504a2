"""
Repository analysis engine for tune-my-repos.
"""

from datetime import datetime, timezone
from typing import Callable

from rich.console import Console

from tune_my_repos.checks import CheckContext, CheckSpec, load_check_specs
from tune_my_repos.classification import classify_repository
from tune_my_repos.config import is_verbose_enabled
from tune_my_repos.errors import AnalysisError, ApiError, NetworkError
from tune_my_repos.github import GitHubClient
from tune_my_repos.models import (
    AnalysisResult,
    FileTree,
    ForkStatus,
    RepositoryIdentity,
    RepositoryMetadata,
    SyncStatus,
    calculate_maturity,
)
from tune_my_repos.org_inheritance import OrgInheritanceCache, OrgInheritanceResolver

__all__ = [
    "FORK_SYNC_LIMITATION",
    "RepositoryAnalyzer",
    "calculate_maturity",
    "derive_fork_status",
]

console = Console()

ProgressCallback = Callable[[str], None]

FORK_SYNC_LIMITATION = "Fork ahead/behind status requires additional API calls"


def derive_fork_status(metadata: RepositoryMetadata) -> tuple[ForkStatus, list[str]]:
    """
    Build the fork status of a repository.

    Ahead/behind counts against the upstream are not computed: a repository
    with a parent gets sync status `unknown` and a limitation note.
    """
    if metadata.parent_full_name:
        return (
            ForkStatus(
                is_fork=metadata.is_fork,
                upstream_full_name=metadata.parent_full_name,
                sync_status=SyncStatus.UNKNOWN,
            ),
            [FORK_SYNC_LIMITATION],
        )
    return ForkStatus(is_fork=metadata.is_fork), []


class RepositoryAnalyzer:
    """
    Runs the governance rubric against one repository at a time.

    One analyzer (and therefore one OrgInheritanceCache) is meant to live for
    a single batch run.
    """

    def __init__(
        self,
        client: GitHubClient | None = None,
        org_resolver: OrgInheritanceResolver | None = None,
        checks: list[CheckSpec] | None = None,
    ):
        self.client = client or GitHubClient()
        self.org_resolver = org_resolver or OrgInheritanceResolver(
            self.client, OrgInheritanceCache()
        )
        self.checks = checks if checks is not None else load_check_specs()

    def _fetch_metadata(self, identity: RepositoryIdentity) -> RepositoryMetadata:
        data = self.client.get_repository(identity.owner, identity.name)
        return RepositoryMetadata.from_api(data)

    def _fetch_tree(
        self, identity: RepositoryIdentity, metadata: RepositoryMetadata
    ) -> FileTree:
        data = self.client.get_tree(
            identity.owner, identity.name, metadata.default_branch
        )
        if data.get("truncated") and is_verbose_enabled():
            console.print(
                f"[dim]File tree of {identity.full_name} was truncated by GitHub[/dim]"
            )
        return FileTree.from_api(data)

    def analyze(
        self,
        identity: RepositoryIdentity,
        on_progress: ProgressCallback | None = None,
    ) -> AnalysisResult:
        """
        Analyze a single repository.

        Args:
            identity: Repository to analyze.
            on_progress: Optional callback receiving human-readable step messages.

        Returns:
            AnalysisResult with classification, findings and limitations.

        Raises:
            AnalysisError: If the metadata or file tree fetch fails.
        """

        def progress(message: str) -> None:
            if on_progress is not None:
                on_progress(message)

        analyzed_at = datetime.now(timezone.utc).isoformat()

        try:
            progress("Fetching repository metadata...")
            metadata = self._fetch_metadata(identity)

            progress("Analyzing fork status...")
            fork, limitations = derive_fork_status(metadata)

            progress("Checking for organization-level governance files...")
            has_org_github = self.org_resolver.org_has_github_repo(identity.owner)

            progress("Fetching repository file tree...")
            files = self._fetch_tree(identity, metadata)
            progress(f"Found {len(files)} files in repository")
        except (ApiError, NetworkError) as e:
            raise AnalysisError(e) from e

        progress("Classifying repository type...")
        classification = classify_repository(files, metadata)
        progress(f"Classified as: {classification.value}")

        context = CheckContext(
            owner=identity.owner,
            name=identity.name,
            files=files,
            metadata=metadata,
            org=self.org_resolver,
            has_org_github=has_org_github,
        )

        findings = []
        for spec in self.checks:
            if spec.progress:
                progress(spec.progress)
            outcome = spec.checker(context)
            findings.extend(outcome.findings)
            limitations.extend(outcome.limitations)

        progress("Calculating maturity score...")
        result = AnalysisResult(
            repository=identity,
            analyzed_at=analyzed_at,
            classification=classification,
            fork=fork,
            findings=findings,
            limitations=limitations,
            file_count=len(files),
        )
        progress("Analysis complete!")
        return result
