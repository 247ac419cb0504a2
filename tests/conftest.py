"""
Shared fixtures: isolated configuration and a fake GitHub REST API.
"""

import httpx
import pytest

import tune_my_repos.config
from tune_my_repos.github import GitHubClient


class FakeGitHub:
    """
    Routes GitHub REST paths to canned responses through httpx.MockTransport.

    Unknown paths answer 404 with a GitHub-style body. Listing pages are
    registered per page number.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, payload=None, status=200, headers=None, error=None, text=None):
        self.routes[path] = (status, payload, headers or {}, error, text)

    def add_page(self, path, page, payload):
        self.routes[f"{path}#page={page}"] = (200, payload, {}, None, None)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.path
        page = request.url.params.get("page")
        if page is not None and f"{key}#page={page}" in self.routes:
            key = f"{key}#page={page}"

        if key not in self.routes:
            return httpx.Response(404, json={"message": "Not Found"})

        status, payload, headers, error, text = self.routes[key]
        if error is not None:
            raise error("Connection refused", request=request)
        if text is not None:
            return httpx.Response(status, text=text, headers=headers)
        return httpx.Response(status, json=payload, headers=headers)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def count(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.path == path)

    def add_repository(
        self,
        owner,
        name,
        paths,
        fork=False,
        parent=None,
        description="A repository",
        homepage="https://example.com",
        topics=("governance",),
    ):
        data = {
            "name": name,
            "full_name": f"{owner}/{name}",
            "default_branch": "main",
            "fork": fork,
            "description": description,
            "homepage": homepage,
            "topics": list(topics),
        }
        if parent:
            data["parent"] = {"full_name": parent}
        self.add(f"/repos/{owner}/{name}", data)
        self.add(
            f"/repos/{owner}/{name}/git/trees/main",
            {"tree": [{"path": p, "type": "blob"} for p in paths], "truncated": False},
        )


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment and config files."""
    for name in (
        "GITHUB_TOKEN",
        "GITHUB_OAUTH_CLIENT_ID",
        "GITHUB_OAUTH_PROXY",
        "GITHUB_OAUTH_REDIRECT_URI",
        "TUNE_MY_REPOS_CACHE_DIR",
        "TUNE_MY_REPOS_CACHE_TTL",
    ):
        monkeypatch.delenv(name, raising=False)

    project_root = tmp_path / "project"
    project_root.mkdir()
    monkeypatch.setattr(tune_my_repos.config, "PROJECT_ROOT", project_root)
    monkeypatch.setattr(tune_my_repos.config, "VERIFY_SSL", True)
    monkeypatch.setattr(tune_my_repos.config, "_VERBOSE", None)
    monkeypatch.setattr(tune_my_repos.config, "_CACHE_TTL", None)
    monkeypatch.setattr(tune_my_repos.config, "_CACHE_DIR", tmp_path / "cache")
    yield project_root


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def github_client(fake_github):
    """GitHubClient wired to the fake API."""
    return GitHubClient(token="test-token", client=fake_github.client())
