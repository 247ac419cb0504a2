"""Shared HTTP client for GitHub and OAuth proxy requests."""

from typing import NamedTuple

import httpx

from tune_my_repos import __version__
from tune_my_repos.config import get_request_timeout, get_verify_ssl

USER_AGENT = f"tune-my-repos/{__version__}"

# Batch runs are sequential, so a handful of connections is plenty
POOL_LIMITS = httpx.Limits(max_connections=4, max_keepalive_connections=2)


class ClientSettings(NamedTuple):
    verify_ssl: bool
    timeout: float

    @classmethod
    def current(cls) -> "ClientSettings":
        return cls(verify_ssl=get_verify_ssl(), timeout=get_request_timeout())


_shared: tuple[httpx.Client, ClientSettings] | None = None


def _get_http_client() -> httpx.Client:
    """
    Return the pooled client, building a new one when the settings it was
    created with (SSL verification, timeout) no longer match the config.
    """
    global _shared
    settings = ClientSettings.current()

    if _shared is not None:
        client, built_with = _shared
        if built_with == settings and not client.is_closed:
            return client
        client.close()

    client = httpx.Client(
        verify=settings.verify_ssl,
        timeout=settings.timeout,
        headers={"User-Agent": USER_AGENT},
        limits=POOL_LIMITS,
    )
    _shared = (client, settings)
    return client


def close_http_client() -> None:
    """Close the pooled client; the next request opens a fresh one."""
    global _shared
    if _shared is not None:
        _shared[0].close()
        _shared = None
