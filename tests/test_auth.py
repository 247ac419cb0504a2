"""
Tests for the OAuth session state machine.
"""

import json

import httpx
import pytest

from tune_my_repos.auth import AUTHORIZE_URL, OAuthSession, SessionState, mask_token
from tune_my_repos.errors import ApiError, ConfigurationError, CsrfError, TuneMyReposError

PROXY_URL = "https://proxy.example.com/authenticate"


class FakeProxy:
    """Token exchange proxy plus the /user endpoint."""

    def __init__(self, status=200, body=None, user_status=200):
        self.status = status
        self.body = {"access_token": "gho_fresh"} if body is None else body
        self.user_status = user_status
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/user":
            if self.user_status != 200:
                return httpx.Response(self.user_status, json={"message": "Bad credentials"})
            return httpx.Response(200, json={"login": "octo"})
        return httpx.Response(self.status, json=self.body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    @property
    def exchanges(self):
        return [r for r in self.requests if r.url.path == "/authenticate"]


@pytest.fixture
def proxy():
    return FakeProxy()


@pytest.fixture
def session(proxy):
    return OAuthSession(
        client_id="client-123",
        redirect_uri="http://localhost:8000/",
        proxy_url=PROXY_URL,
        client=proxy.client(),
    )


def _state_from(url: str) -> str:
    return httpx.URL(url).params["state"]


def test_login_builds_authorize_url(session):
    url = httpx.URL(session.login())

    assert str(url).startswith(AUTHORIZE_URL)
    assert url.params["client_id"] == "client-123"
    assert url.params["redirect_uri"] == "http://localhost:8000/"
    assert url.params["scope"] == "public_repo"
    assert len(url.params["state"]) == 32
    assert session.state is SessionState.PENDING_CALLBACK


def test_each_login_issues_new_state(session):
    assert _state_from(session.login()) != _state_from(session.login())


def test_login_without_client_id():
    session = OAuthSession(client_id="", proxy_url=PROXY_URL)

    with pytest.raises(ConfigurationError, match="not configured"):
        session.login()
    assert session.state is SessionState.LOGGED_OUT


def test_successful_callback(session, proxy):
    authenticated = []
    session.on_authenticated = authenticated.append
    state = _state_from(session.login())

    token = session.handle_callback("the-code", state)

    assert token == "gho_fresh"
    assert session.is_authenticated()
    assert session.state is SessionState.LOGGED_IN
    assert session.csrf_state is None
    assert authenticated == [session]
    assert json.loads(proxy.exchanges[0].content) == {
        "code": "the-code",
        "client_id": "client-123",
        "redirect_uri": "http://localhost:8000/",
    }


def test_state_mismatch_never_exchanges(session, proxy):
    session.login()

    with pytest.raises(CsrfError):
        session.handle_callback("the-code", "forged-state")

    assert proxy.exchanges == []
    assert session.state is SessionState.LOGGED_OUT


def test_callback_without_login_is_rejected(session, proxy):
    with pytest.raises(CsrfError):
        session.handle_callback("the-code", "anything")
    assert proxy.exchanges == []


def test_stale_state_is_rejected(session, proxy):
    """Only the most recently issued state is accepted."""
    old_state = _state_from(session.login())
    session.login()

    with pytest.raises(CsrfError):
        session.handle_callback("the-code", old_state)
    assert proxy.exchanges == []


def test_missing_proxy_is_configuration_error(proxy):
    session = OAuthSession(client_id="client-123", proxy_url="", client=proxy.client())
    state = _state_from(session.login())

    with pytest.raises(ConfigurationError, match="OAuth proxy not configured"):
        session.handle_callback("the-code", state)
    assert session.state is SessionState.LOGGED_OUT


def test_proxy_error_clears_state():
    proxy = FakeProxy(status=502)
    session = OAuthSession(client_id="c", proxy_url=PROXY_URL, client=proxy.client())
    state = _state_from(session.login())

    with pytest.raises(ApiError, match="Failed to exchange OAuth code for token"):
        session.handle_callback("the-code", state)
    assert session.state is SessionState.LOGGED_OUT


def test_proxy_without_token():
    proxy = FakeProxy(body={"error": "bad_verification_code"})
    session = OAuthSession(client_id="c", proxy_url=PROXY_URL, client=proxy.client())
    state = _state_from(session.login())

    with pytest.raises(TuneMyReposError, match="No access token in response"):
        session.handle_callback("the-code", state)
    assert not session.is_authenticated()


def test_handle_callback_url_strips_code_and_state(session):
    state = _state_from(session.login())

    cleaned = session.handle_callback_url(
        f"http://localhost:8000/?code=abc&state={state}&tab=results"
    )

    assert cleaned == "http://localhost:8000/?tab=results"
    assert session.is_authenticated()


def test_handle_callback_url_without_code(session):
    session.login()

    with pytest.raises(TuneMyReposError, match="authorization code"):
        session.handle_callback_url("http://localhost:8000/")


def test_handle_callback_url_with_provider_error(session):
    session.login()

    with pytest.raises(TuneMyReposError, match="user denied"):
        session.handle_callback_url(
            "http://localhost:8000/?error=access_denied&error_description=user+denied"
        )
    assert session.state is SessionState.LOGGED_OUT


def test_get_user_info(session):
    session.token = "gho_valid"

    assert session.get_user_info() == {"login": "octo"}


def test_get_user_info_401_clears_token():
    proxy = FakeProxy(user_status=401)
    session = OAuthSession(client_id="c", proxy_url=PROXY_URL, client=proxy.client())
    session.token = "gho_revoked"

    assert session.get_user_info() is None
    assert not session.is_authenticated()


def test_get_user_info_other_failure_keeps_token():
    proxy = FakeProxy(user_status=500)
    session = OAuthSession(client_id="c", proxy_url=PROXY_URL, client=proxy.client())
    session.token = "gho_valid"

    assert session.get_user_info() is None
    assert session.is_authenticated()


def test_get_user_info_non_json_body():
    client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="oops"))
    )
    session = OAuthSession(client_id="c", proxy_url=PROXY_URL, client=client)
    session.token = "gho_valid"

    assert session.get_user_info() is None
    assert session.is_authenticated()


def test_get_user_info_without_token(session, proxy):
    assert session.get_user_info() is None
    assert proxy.requests == []


def test_logout(session):
    session.token = "gho_valid"
    session.login()

    session.logout()

    assert session.state is SessionState.LOGGED_OUT


def test_mask_token():
    assert mask_token("gho_secret") == "Present (gho_...)"
    assert mask_token(None) == "Not present"
