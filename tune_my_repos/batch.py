"""
Batch analysis of every repository owned by a user or organization.
"""

import threading
from collections import Counter
from typing import Any, Callable, NamedTuple, Sequence

from rich.console import Console

from tune_my_repos.account import resolve_account_type
from tune_my_repos.config import is_verbose_enabled
from tune_my_repos.core import RepositoryAnalyzer
from tune_my_repos.errors import BatchError
from tune_my_repos.github import MAX_PAGE_SIZE, GitHubClient
from tune_my_repos.models import (
    AccountType,
    AnalysisResult,
    AnalysisStats,
    MaturityLevel,
    RepositoryIdentity,
    Severity,
    count_by_severity,
)

console = Console()

# Called as (index, total, full_name) before each repository is analyzed
BatchProgressCallback = Callable[[int, int, str], None]


class BatchResult(NamedTuple):
    """Results of a batch run plus the counts needed to report it."""

    results: list[AnalysisResult]
    stats: AnalysisStats
    messages: Sequence[str] = ()
    warnings: Sequence[str] = ()
    cancelled: bool = False


class BatchSummary(NamedTuple):
    overall_maturity: MaturityLevel
    total_repositories: int
    critical: int
    important: int
    maturity_counts: dict[str, int]


def list_repositories(
    client: GitHubClient, login: str, account_type: AccountType
) -> list[dict[str, Any]]:
    """
    Fetch every repository of a user or organization.

    Pages are requested in increasing order at the maximum page size until a
    page comes back short. The API order (most recently updated first) is kept.
    """
    repos: list[dict[str, Any]] = []
    page = 1
    while True:
        batch = client.list_repositories_page(login, account_type, page)
        repos.extend(batch)
        if len(batch) < MAX_PAGE_SIZE:
            break
        page += 1
    return repos


def _identity_of(repo: dict[str, Any], login: str) -> RepositoryIdentity:
    owner = (repo.get("owner") or {}).get("login") or login
    return RepositoryIdentity(owner, repo["name"])


def analyze_all(
    login: str,
    skip_forks: bool = False,
    client: GitHubClient | None = None,
    analyzer: RepositoryAnalyzer | None = None,
    cancel_event: threading.Event | None = None,
    on_progress: BatchProgressCallback | None = None,
) -> BatchResult:
    """
    Analyze every repository of a user or organization, one at a time.

    A failure on one repository is reported and counted but never stops the
    run. If every attempted repository fails, the run fails as a whole.

    Args:
        login: GitHub user or organization name.
        skip_forks: Leave out repositories flagged as forks.
        client: GitHub gateway (a new one is created if omitted).
        analyzer: Repository analyzer; a fresh one (with a fresh org cache) is
            created for the run if omitted.
        cancel_event: When set, the run stops before the next repository.
        on_progress: Called before each repository is analyzed.

    Returns:
        BatchResult with per-repository results in listing order.

    Raises:
        ApiError, NetworkError: If the repository listing itself fails.
        BatchError: If every repository analysis failed.
    """
    client = client or GitHubClient()
    analyzer = analyzer or RepositoryAnalyzer(client)

    messages: list[str] = []
    warnings: list[str] = []

    resolution = resolve_account_type(client, login)
    if resolution.warning:
        warnings.append(resolution.warning)

    repos = list_repositories(client, login, resolution.account_type)
    original_count = len(repos)

    skipped = 0
    if skip_forks:
        repos = [repo for repo in repos if not repo.get("fork")]
        skipped = original_count - len(repos)
        if skipped > 0:
            if not repos:
                messages.append(
                    f"All {original_count} repositories were forks and were skipped. "
                    "Run without --skip-forks to analyze them."
                )
            else:
                messages.append(
                    f"Skipped {skipped} forked repositories. "
                    f"Analyzing {len(repos)} non-fork repositories."
                )

    if original_count == 0:
        messages.append(f"No repositories found for {login}")

    results: list[AnalysisResult] = []
    failed = 0
    attempted = 0
    cancelled = False
    total = len(repos)

    for index, repo in enumerate(repos, start=1):
        if cancel_event is not None and cancel_event.is_set():
            cancelled = True
            break

        identity = _identity_of(repo, login)
        if on_progress is not None:
            on_progress(index, total, identity.full_name)

        attempted += 1
        try:
            results.append(analyzer.analyze(identity))
        except Exception as e:
            failed += 1
            console.print(f"[red]Error analyzing {identity.full_name}: {e}[/red]")

    if is_verbose_enabled():
        console.print(
            f"[dim]Analysis complete: {len(results)} succeeded, {failed} failed "
            f"out of {attempted} total[/dim]"
        )

    if failed > 0 and not results:
        raise BatchError(f"All {failed} repository analyses failed.", failed=failed)

    return BatchResult(
        results=results,
        stats=AnalysisStats(
            succeeded=len(results),
            failed=failed,
            total=attempted,
            skipped_forks=skipped,
        ),
        messages=messages,
        warnings=warnings,
        cancelled=cancelled,
    )


def summarize_batch(results: list[AnalysisResult]) -> BatchSummary:
    """
    Aggregate a batch into an overall maturity level.

    Overall maturity is high when more than half of the repositories are high,
    low when more than half are low, and medium otherwise.
    """
    maturity_counts = Counter(result.maturity_level.value for result in results)
    critical = 0
    important = 0
    for result in results:
        counts = count_by_severity(result.findings)
        critical += counts[Severity.CRITICAL.value]
        important += counts[Severity.IMPORTANT.value]

    total = len(results)
    if total and maturity_counts[MaturityLevel.HIGH.value] > total / 2:
        overall = MaturityLevel.HIGH
    elif total and maturity_counts[MaturityLevel.LOW.value] > total / 2:
        overall = MaturityLevel.LOW
    else:
        overall = MaturityLevel.MEDIUM

    return BatchSummary(
        overall_maturity=overall,
        total_repositories=total,
        critical=critical,
        important=important,
        maturity_counts={level.value: maturity_counts[level.value] for level in MaturityLevel},
    )
