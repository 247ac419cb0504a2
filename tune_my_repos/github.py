"""
GitHub REST gateway for tune-my-repos.

Issues authenticated GET requests against the endpoints the rubric checks need
and converts failures into NetworkError / ApiError.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import httpx
from dotenv import load_dotenv

from tune_my_repos.config import get_github_token
from tune_my_repos.errors import ApiError, NetworkError
from tune_my_repos.http_client import _get_http_client
from tune_my_repos.models import AccountType

if TYPE_CHECKING:
    from tune_my_repos.auth import OAuthSession

# Load environment variables
load_dotenv()

GITHUB_API = "https://api.github.com"
ACCEPT_HEADER = "application/vnd.github.v3+json"

# Largest page size the repository listing endpoints accept
MAX_PAGE_SIZE = 100


def _parse_rate_limit(response: httpx.Response) -> tuple[int | None, datetime | None]:
    remaining_raw = response.headers.get("X-RateLimit-Remaining")
    reset_raw = response.headers.get("X-RateLimit-Reset")
    remaining = int(remaining_raw) if remaining_raw and remaining_raw.isdigit() else None
    reset = (
        datetime.fromtimestamp(int(reset_raw), tz=timezone.utc)
        if reset_raw and reset_raw.isdigit()
        else None
    )
    return remaining, reset


def api_error_from_response(response: httpx.Response) -> ApiError:
    """
    Build an ApiError from a non-2xx response.

    The message comes from the body's `message` field when it parses,
    otherwise "GitHub API error: {status}".
    """
    message = f"GitHub API error: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = body["message"]

    remaining, reset = _parse_rate_limit(response)
    return ApiError(
        response.status_code,
        message,
        rate_limit_remaining=remaining,
        rate_limit_reset=reset,
    )


class GitHubClient:
    """Minimal GitHub REST client for repository analysis."""

    def __init__(
        self,
        token: str | None = None,
        session: OAuthSession | None = None,
        client: httpx.Client | None = None,
        api_base: str = GITHUB_API,
    ):
        """
        Initialize the gateway.

        Args:
            token: Personal Access Token. If not provided, reads GITHUB_TOKEN.
                   Unauthenticated access works but is limited to 60 requests/hour.
            session: OAuth session whose token, when present, takes precedence.
            client: httpx.Client to use instead of the shared pooled client.
            api_base: REST API root.
        """
        self.token = token or get_github_token()
        self.session = session
        self.api_base = api_base.rstrip("/")
        self._client = client

    @property
    def current_token(self) -> str | None:
        """The credential attached to the next request."""
        if self.session is not None and self.session.token:
            return self.session.token
        return self.token

    def _http(self) -> httpx.Client:
        return self._client if self._client is not None else _get_http_client()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": ACCEPT_HEADER}
        token = self.current_token
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    def fetch_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a URL (absolute, or a path relative to the API root) and decode JSON.

        Raises:
            NetworkError: If no response was received (DNS, refused, timeout).
            ApiError: If GitHub answered with a non-2xx status, or with a
                2xx body that is not JSON.
        """
        if url.startswith("/"):
            url = f"{self.api_base}{url}"

        try:
            response = self._http().get(url, params=params, headers=self._headers())
        except httpx.RequestError as e:
            raise NetworkError(f"Network error fetching {url}: {e}", cause=e) from e

        if not response.is_success:
            raise api_error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Invalid JSON response") from e

    def get_user(self, login: str) -> dict[str, Any]:
        return self.fetch_json(f"/users/{login}")

    def get_authenticated_user(self) -> dict[str, Any]:
        return self.fetch_json("/user")

    def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return self.fetch_json(f"/repos/{owner}/{repo}")

    def get_tree(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        return self.fetch_json(
            f"/repos/{owner}/{repo}/git/trees/{branch}", params={"recursive": 1}
        )

    def get_org_github_repository(self, owner: str) -> dict[str, Any]:
        return self.fetch_json(f"/repos/{owner}/.github")

    def get_org_github_contents(self, owner: str, filename: str) -> Any:
        return self.fetch_json(f"/repos/{owner}/.github/contents/{filename}")

    def list_repositories_page(
        self,
        login: str,
        account_type: AccountType,
        page: int,
        per_page: int = MAX_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """
        Fetch one page of repositories, most recently updated first.

        Organizations are listed through /orgs/{login}/repos, users through
        /users/{login}/repos.
        """
        kind = "orgs" if account_type is AccountType.ORGANIZATION else "users"
        return self.fetch_json(
            f"/{kind}/{login}/repos",
            params={
                "sort": "updated",
                "direction": "desc",
                "per_page": per_page,
                "page": page,
            },
        )
