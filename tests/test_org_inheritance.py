"""
Tests for organization-level community health file detection.
"""

import httpx

from tune_my_repos.org_inheritance import (
    HAS_GITHUB_REPO,
    OrgInheritanceCache,
    OrgInheritanceResolver,
)


def test_org_github_repo_exists(fake_github, github_client):
    fake_github.add("/repos/acme/.github", {"name": ".github"})
    resolver = OrgInheritanceResolver(github_client)

    assert resolver.org_has_github_repo("acme") is True


def test_org_github_repo_missing(fake_github, github_client):
    resolver = OrgInheritanceResolver(github_client)

    assert resolver.org_has_github_repo("acme") is False


def test_repeated_probes_hit_network_once(fake_github, github_client):
    """A negative result is memoized as well as a positive one."""
    fake_github.add("/repos/acme/.github/contents/SECURITY.md", {"name": "SECURITY.md"})
    resolver = OrgInheritanceResolver(github_client)

    for _ in range(3):
        assert resolver.org_has_github_repo("acme") is False
        assert resolver.file_exists_in_org_github("acme", "SECURITY.md") is True

    assert fake_github.count("/repos/acme/.github") == 1
    assert fake_github.count("/repos/acme/.github/contents/SECURITY.md") == 1


def test_probe_keys_are_per_owner_and_filename(fake_github, github_client):
    fake_github.add("/repos/acme/.github/contents/LICENSE", {"name": "LICENSE"})
    resolver = OrgInheritanceResolver(github_client)

    assert resolver.file_exists_in_org_github("acme", "LICENSE") is True
    assert resolver.file_exists_in_org_github("acme", "SECURITY.md") is False
    assert resolver.file_exists_in_org_github("other", "LICENSE") is False
    assert len(resolver.cache) == 3


def test_non_404_failure_counts_as_missing(fake_github, github_client):
    fake_github.add("/repos/acme/.github", {"message": "Server Error"}, status=500)
    resolver = OrgInheritanceResolver(github_client)

    assert resolver.org_has_github_repo("acme") is False
    assert resolver.org_has_github_repo("acme") is False
    assert fake_github.count("/repos/acme/.github") == 1


def test_network_failure_counts_as_missing(fake_github, github_client):
    fake_github.add("/repos/acme/.github", error=httpx.ConnectError)
    resolver = OrgInheritanceResolver(github_client)

    assert resolver.org_has_github_repo("acme") is False


def test_cache_never_overwrites():
    cache = OrgInheritanceCache()

    assert cache.set("acme", HAS_GITHUB_REPO, False) is False
    assert cache.set("acme", HAS_GITHUB_REPO, True) is False
    assert cache.get("acme", HAS_GITHUB_REPO) is False
    assert ("acme", HAS_GITHUB_REPO) in cache


def test_shared_cache_across_resolvers(fake_github, github_client):
    cache = OrgInheritanceCache()
    OrgInheritanceResolver(github_client, cache).org_has_github_repo("acme")
    OrgInheritanceResolver(github_client, cache).org_has_github_repo("acme")

    assert fake_github.count("/repos/acme/.github") == 1


def test_org_github_url():
    assert OrgInheritanceResolver.org_github_url("acme") == "https://github.com/acme/.github"
