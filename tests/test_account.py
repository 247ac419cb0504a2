"""
Tests for account type detection.
"""

import httpx

from tune_my_repos.account import resolve_account_type
from tune_my_repos.models import AccountType


def test_organization(fake_github, github_client):
    fake_github.add("/users/acme", {"login": "acme", "type": "Organization"})

    resolution = resolve_account_type(github_client, "acme")

    assert resolution.account_type is AccountType.ORGANIZATION
    assert not resolution.is_fallback


def test_user(fake_github, github_client):
    fake_github.add("/users/octo", {"login": "octo", "type": "User"})

    assert resolve_account_type(github_client, "octo").account_type is AccountType.USER


def test_unknown_type_is_user(fake_github, github_client):
    fake_github.add("/users/bot", {"login": "bot", "type": "Bot"})

    assert resolve_account_type(github_client, "bot").account_type is AccountType.USER


def test_api_failure_falls_back_to_user_with_warning(fake_github, github_client):
    fake_github.add("/users/acme", {"message": "Server Error"}, status=500)

    resolution = resolve_account_type(github_client, "acme")

    assert resolution.account_type is AccountType.USER
    assert resolution.is_fallback
    assert "acme" in resolution.warning


def test_network_failure_falls_back_to_user(fake_github, github_client):
    fake_github.add("/users/acme", error=httpx.ConnectError)

    resolution = resolve_account_type(github_client, "acme")

    assert resolution.account_type is AccountType.USER
    assert resolution.is_fallback
