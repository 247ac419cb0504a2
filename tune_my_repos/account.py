"""Account type detection (User vs Organization)."""

from typing import NamedTuple

from rich.console import Console

from tune_my_repos.errors import ApiError, NetworkError
from tune_my_repos.github import GitHubClient
from tune_my_repos.models import AccountType

console = Console()


class AccountTypeResolution(NamedTuple):
    """Resolved account type, with a warning when it is a fallback."""

    account_type: AccountType
    warning: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.warning is not None


def resolve_account_type(client: GitHubClient, login: str) -> AccountTypeResolution:
    """
    Determine whether a login is a User or an Organization.

    Any failure falls back to User: the /users/{login}/repos listing is a safe,
    if sometimes incomplete, default for organizations too.

    Args:
        client: GitHub gateway.
        login: GitHub user or organization name.

    Returns:
        AccountTypeResolution with the detected type and an optional warning.
    """
    try:
        data = client.get_user(login)
    except (ApiError, NetworkError) as e:
        warning = (
            f"Could not determine account type for {login} ({e}); "
            "listing repositories as a user account."
        )
        console.print(f"[yellow]⚠️  {warning}[/yellow]")
        return AccountTypeResolution(AccountType.USER, warning)

    if data.get("type") == AccountType.ORGANIZATION.value:
        return AccountTypeResolution(AccountType.ORGANIZATION)
    return AccountTypeResolution(AccountType.USER)
