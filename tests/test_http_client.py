"""
Tests for the pooled HTTP client.
"""

import pytest

from tune_my_repos.config import set_verify_ssl
from tune_my_repos.http_client import USER_AGENT, _get_http_client, close_http_client


@pytest.fixture(autouse=True)
def fresh_client():
    close_http_client()
    yield
    close_http_client()


def test_client_is_reused():
    client = _get_http_client()

    assert _get_http_client() is client
    assert client.headers["User-Agent"] == USER_AGENT


def test_ssl_change_rebuilds_client():
    client = _get_http_client()

    set_verify_ssl(False)
    rebuilt = _get_http_client()

    assert rebuilt is not client
    assert client.is_closed


def test_timeout_change_rebuilds_client(isolated_config):
    client = _get_http_client()
    (isolated_config / ".tune-my-repos.toml").write_text(
        "[tool.tune-my-repos]\nrequest_timeout = 3\n"
    )

    rebuilt = _get_http_client()

    assert rebuilt is not client
    assert rebuilt.timeout.read == 3


def test_close_then_reopen():
    client = _get_http_client()

    close_http_client()

    assert client.is_closed
    assert _get_http_client() is not client
