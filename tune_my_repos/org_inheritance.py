"""
Organization-level community health file detection.

GitHub applies files from an organization's `.github` repository to member
repositories that lack their own copy. Probes here are best-effort: any
failure counts as "not inherited" and never aborts an analysis.
"""

from rich.console import Console

from tune_my_repos.config import is_verbose_enabled
from tune_my_repos.errors import ApiError, NetworkError
from tune_my_repos.github import GitHubClient

console = Console()

# Probe key meaning "the org .github repository exists"
HAS_GITHUB_REPO = "_has_github_repo"


class OrgInheritanceCache:
    """
    Memoized probe results keyed by (owner, probe key).

    Scoped to one analyzer / batch run. A key, once set, is never overwritten.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], bool] = {}

    def get(self, owner: str, key: str) -> bool | None:
        return self._entries.get((owner, key))

    def set(self, owner: str, key: str, value: bool) -> bool:
        """Store a result unless one exists; return the stored value."""
        return self._entries.setdefault((owner, key), value)

    def __contains__(self, item: tuple[str, str]) -> bool:
        return item in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class OrgInheritanceResolver:
    """Answers "does {owner}/.github provide this file?" with memoization."""

    def __init__(
        self, client: GitHubClient, cache: OrgInheritanceCache | None = None
    ):
        self.client = client
        self.cache = cache if cache is not None else OrgInheritanceCache()

    def _probe(self, owner: str, key: str, fetch) -> bool:
        cached = self.cache.get(owner, key)
        if cached is not None:
            return cached

        try:
            fetch()
            found = True
        except ApiError as e:
            found = False
            if not e.is_not_found and is_verbose_enabled():
                console.print(
                    f"[dim]Org probe {owner}/.github ({key}) failed: {e}[/dim]"
                )
        except NetworkError as e:
            found = False
            if is_verbose_enabled():
                console.print(
                    f"[dim]Org probe {owner}/.github ({key}) unreachable: {e}[/dim]"
                )

        return self.cache.set(owner, key, found)

    def org_has_github_repo(self, owner: str) -> bool:
        """Check whether {owner}/.github exists."""
        return self._probe(
            owner,
            HAS_GITHUB_REPO,
            lambda: self.client.get_org_github_repository(owner),
        )

    def file_exists_in_org_github(self, owner: str, filename: str) -> bool:
        """Check whether {owner}/.github contains `filename` at its root."""
        return self._probe(
            owner,
            filename,
            lambda: self.client.get_org_github_contents(owner, filename),
        )

    @staticmethod
    def org_github_url(owner: str) -> str:
        return f"https://github.com/{owner}/.github"
