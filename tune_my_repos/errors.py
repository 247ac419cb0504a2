"""Exception types and remediation hints for tune-my-repos."""

from __future__ import annotations

from datetime import datetime


class TuneMyReposError(Exception):
    """Base exception for analysis failures."""


class NetworkError(TuneMyReposError):
    """Raised when a request never produced an HTTP response (DNS, refused, timeout)."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ApiError(TuneMyReposError):
    """Raised when the GitHub API answers with a non-2xx status."""

    def __init__(
        self,
        status: int,
        message: str,
        rate_limit_remaining: int | None = None,
        rate_limit_reset: datetime | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.message = message
        self.rate_limit_remaining = rate_limit_remaining
        self.rate_limit_reset = rate_limit_reset

    @property
    def is_rate_limited(self) -> bool:
        return self.status in (403, 429) and self.rate_limit_remaining == 0

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class ConfigurationError(TuneMyReposError):
    """Raised when required configuration (client id, proxy, ...) is missing."""


class CsrfError(TuneMyReposError):
    """Raised when an OAuth callback carries a state that was not issued by us."""


class AnalysisError(TuneMyReposError):
    """Raised when a mandatory fetch for one repository fails."""

    def __init__(self, cause: Exception):
        super().__init__(f"Analysis failed: {cause}")
        self.cause = cause


class BatchError(TuneMyReposError):
    """Raised when every repository in a batch run failed."""

    def __init__(self, message: str, failed: int):
        super().__init__(message)
        self.failed = failed


def remediation_hint(error: Exception) -> str | None:
    """
    Suggest a next step for a user-visible failure.

    Distinguishes "target not found", "rate-limited", "stale token",
    "network/transport", configuration and CSRF causes.

    Args:
        error: The exception to explain. AnalysisError is unwrapped to its cause.

    Returns:
        A one-line hint, or None when no specific advice applies.
    """
    if isinstance(error, AnalysisError):
        return remediation_hint(error.cause)

    if isinstance(error, ApiError):
        if error.is_rate_limited:
            if error.rate_limit_reset is not None:
                reset = error.rate_limit_reset.astimezone().strftime("%H:%M:%S")
                return f"Rate limit exceeded. Resets at {reset}. Add a GITHUB_TOKEN for 5,000 requests/hour."
            return "Rate limit exceeded. Add a GITHUB_TOKEN for 5,000 requests/hour."
        if error.status == 404:
            return "The target does not exist or is not accessible with the current credentials."
        if error.status == 401:
            return "The GitHub token is invalid or expired. Create a new token or log in again."
        if error.status == 403:
            return "Access denied. Check the token scopes (public_repo, or repo for private repositories)."
        return None

    if isinstance(error, NetworkError):
        return "Could not reach api.github.com. Check your network connection, proxy or SSL settings (--insecure)."

    if isinstance(error, ConfigurationError):
        return "See the README configuration section (GITHUB_OAUTH_CLIENT_ID, GITHUB_OAUTH_PROXY, .tune-my-repos.toml)."

    if isinstance(error, CsrfError):
        return "The login response did not match this session. Start the login again; do not reuse old callback links."

    return None
