"""
Tests for error types and remediation hints.
"""

from datetime import datetime, timezone

import httpx

from tune_my_repos.errors import (
    AnalysisError,
    ApiError,
    ConfigurationError,
    CsrfError,
    NetworkError,
    remediation_hint,
)


def test_analysis_error_message_and_cause():
    cause = ApiError(404, "Not Found")
    error = AnalysisError(cause)
    assert str(error) == "Analysis failed: Not Found"
    assert error.cause is cause


def test_rate_limited_only_with_zero_remaining():
    assert ApiError(403, "limit", rate_limit_remaining=0).is_rate_limited
    assert ApiError(429, "limit", rate_limit_remaining=0).is_rate_limited
    assert not ApiError(403, "forbidden", rate_limit_remaining=10).is_rate_limited
    assert not ApiError(403, "forbidden").is_rate_limited


def test_hint_for_rate_limit_includes_reset_time():
    reset = datetime(2026, 1, 1, 12, 30, 0, tzinfo=timezone.utc)
    error = ApiError(403, "API rate limit exceeded", rate_limit_remaining=0, rate_limit_reset=reset)
    hint = remediation_hint(error)
    assert "Rate limit exceeded. Resets at" in hint
    assert reset.astimezone().strftime("%H:%M:%S") in hint


def test_hint_distinguishes_causes():
    not_found = remediation_hint(ApiError(404, "Not Found"))
    stale = remediation_hint(ApiError(401, "Bad credentials"))
    network = remediation_hint(NetworkError("boom", cause=httpx.ConnectError("boom")))

    assert "does not exist" in not_found
    assert "token" in stale
    assert "network" in network
    assert len({not_found, stale, network}) == 3


def test_hint_unwraps_analysis_error():
    assert remediation_hint(AnalysisError(ApiError(404, "Not Found"))) == remediation_hint(
        ApiError(404, "Not Found")
    )


def test_hint_for_configuration_and_csrf():
    assert "README" in remediation_hint(ConfigurationError("no client id"))
    assert "login" in remediation_hint(CsrfError("mismatch"))


def test_no_hint_for_unrelated_errors():
    assert remediation_hint(ApiError(500, "Server Error")) is None
    assert remediation_hint(RuntimeError("other")) is None
