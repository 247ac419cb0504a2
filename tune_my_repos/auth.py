"""
GitHub OAuth (authorization code + CSRF state) session for tune-my-repos.

GitHub's token endpoint cannot be called without the app secret, so the code is
exchanged through a user-deployed proxy (e.g. gatekeeper or a serverless
function) that answers with `{"access_token": ...}`.
"""

import secrets
from enum import Enum
from typing import Any, Callable
from urllib.parse import urlencode

import httpx
from dotenv import load_dotenv
from rich.console import Console

from tune_my_repos.config import (
    get_oauth_client_id,
    get_oauth_proxy_url,
    get_oauth_redirect_uri,
)
from tune_my_repos.errors import (
    ApiError,
    ConfigurationError,
    CsrfError,
    NetworkError,
    TuneMyReposError,
)
from tune_my_repos.github import GitHubClient
from tune_my_repos.http_client import _get_http_client

load_dotenv()

console = Console()

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
OAUTH_SCOPE = "public_repo"


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    PENDING_CALLBACK = "pending_callback"
    LOGGED_IN = "logged_in"


def generate_state() -> str:
    """Random CSRF state: 16 bytes, hex encoded."""
    return secrets.token_hex(16)


def mask_token(token: str | None) -> str:
    if not token:
        return "Not present"
    return f"Present ({token[:4]}...)"


class OAuthSession:
    """
    In-process OAuth session.

    The token lives only as long as this object and, when present, overrides
    any statically configured GITHUB_TOKEN for clients bound to the session.
    """

    def __init__(
        self,
        client_id: str | None = None,
        redirect_uri: str | None = None,
        proxy_url: str | None = None,
        client: httpx.Client | None = None,
        on_authenticated: Callable[["OAuthSession"], None] | None = None,
    ):
        self.client_id = client_id if client_id is not None else get_oauth_client_id()
        self.redirect_uri = redirect_uri or get_oauth_redirect_uri()
        self.proxy_url = proxy_url if proxy_url is not None else get_oauth_proxy_url()
        self.on_authenticated = on_authenticated
        self.csrf_state: str | None = None
        self.token: str | None = None
        self._client = client

    def _http(self) -> httpx.Client:
        return self._client if self._client is not None else _get_http_client()

    @property
    def state(self) -> SessionState:
        if self.token:
            return SessionState.LOGGED_IN
        if self.csrf_state:
            return SessionState.PENDING_CALLBACK
        return SessionState.LOGGED_OUT

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def login(self) -> str:
        """
        Start the authorization flow.

        Returns:
            The GitHub authorize URL the user must open.

        Raises:
            ConfigurationError: If no OAuth client id is configured.
        """
        if not self.client_id:
            raise ConfigurationError(
                "GitHub OAuth is not configured. Set GITHUB_OAUTH_CLIENT_ID, or use a "
                "Personal Access Token instead (GITHUB_TOKEN, 5,000 requests/hour; "
                "create one at https://github.com/settings/tokens)."
            )

        self.csrf_state = generate_state()
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": OAUTH_SCOPE,
            "state": self.csrf_state,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def handle_callback(self, code: str, state: str) -> str:
        """
        Complete the flow with the code and state GitHub redirected back with.

        The pending state is cleared whatever the outcome.

        Returns:
            The access token.

        Raises:
            CsrfError: If `state` is not the one issued by login(). No exchange
                is attempted.
            ConfigurationError: If no exchange proxy is configured.
            NetworkError, ApiError, TuneMyReposError: If the exchange fails.
        """
        expected = self.csrf_state
        self.csrf_state = None

        if not expected or not secrets.compare_digest(
            state.encode(), expected.encode()
        ):
            console.print("[red]OAuth state mismatch - possible CSRF attack[/red]")
            raise CsrfError("OAuth state mismatch - possible CSRF attack")

        if not self.proxy_url:
            raise ConfigurationError(
                "OAuth proxy not configured. Please set GITHUB_OAUTH_PROXY."
            )

        token = self._exchange_code(code)
        self.token = token
        console.print("[green]✓ Successfully authenticated with GitHub OAuth[/green]")
        if self.on_authenticated is not None:
            self.on_authenticated(self)
        return token

    def _exchange_code(self, code: str) -> str:
        try:
            response = self._http().post(
                self.proxy_url,
                json={
                    "code": code,
                    "client_id": self.client_id,
                    "redirect_uri": self.redirect_uri,
                },
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            raise NetworkError(f"Network error contacting OAuth proxy: {e}", cause=e) from e

        if not response.is_success:
            raise ApiError(
                response.status_code, "Failed to exchange OAuth code for token"
            )

        try:
            data: Any = response.json()
        except ValueError:
            data = None
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise TuneMyReposError("No access token in response")
        return token

    def handle_callback_url(self, url: str) -> str:
        """
        Complete the flow from the full redirect URL.

        Returns:
            The URL with `code` and `state` removed.

        Raises:
            TuneMyReposError: If the URL carries an OAuth error or no code/state.
            Anything handle_callback() raises.
        """
        parsed = httpx.URL(url.strip())
        code = parsed.params.get("code")
        state = parsed.params.get("state")

        if parsed.params.get("error"):
            self.csrf_state = None
            detail = parsed.params.get("error_description") or parsed.params["error"]
            raise TuneMyReposError(f"Authentication failed: {detail}")
        if not code or not state:
            raise TuneMyReposError(
                "The URL does not contain an authorization code and state."
            )

        self.handle_callback(code, state)
        return str(parsed.copy_remove_param("code").copy_remove_param("state"))

    def get_user_info(self) -> dict[str, Any] | None:
        """
        Look up the authenticated identity.

        A 401 means the token is no longer valid and clears it. Any failure
        returns None.
        """
        if not self.token:
            return None

        client = GitHubClient(token=self.token, session=self, client=self._client)
        try:
            return client.get_authenticated_user()
        except ApiError as e:
            if e.status == 401:
                self.token = None
            return None
        except NetworkError:
            return None

    def logout(self) -> None:
        self.token = None
        self.csrf_state = None
