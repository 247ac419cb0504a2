"""
Configuration management for tune-my-repos.

Loads settings from:
1. .tune-my-repos.toml (local config)
2. pyproject.toml (project-level config, [tool.tune-my-repos])

Environment variables override both; explicit setters (CLI flags) override everything.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from tune_my_repos.errors import ConfigurationError
from tune_my_repos.models import PriorityConfig, PriorityEntry, SortStrategy

# Directory searched for config files (the current working directory by default)
PROJECT_ROOT = Path.cwd()

LOCAL_CONFIG_NAME = ".tune-my-repos.toml"
TOOL_KEY = "tune-my-repos"

# Global configuration for SSL verification
# Default: True (verify SSL certificates)
# Can be set to False by CLI --insecure flag
VERIFY_SSL = True

# Per-request timeout in seconds
DEFAULT_REQUEST_TIMEOUT = 10.0

# Cache configuration
# Default cache directory: ~/.cache/tune-my-repos
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "tune-my-repos"
# Default TTL: 1 hour (in seconds)
DEFAULT_CACHE_TTL = 60 * 60

DEFAULT_TOP_COUNT = 3

# Values shipped in example .env files that must not be sent as credentials
PLACEHOLDER_TOKENS = {"your_token_here", "ghp_your_token_here"}

# Global settings (can be overridden)
_CACHE_DIR: Path | None = None
_CACHE_TTL: int | None = None
_VERBOSE: bool | None = None


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def get_tool_config() -> dict[str, Any]:
    """
    Return the [tool.tune-my-repos] table.

    Priority:
    1. .tune-my-repos.toml (local config, highest priority)
    2. pyproject.toml (project-level config, fallback)

    Returns:
        The tool table, or an empty dict when neither file defines it.
    """
    local_config_path = PROJECT_ROOT / LOCAL_CONFIG_NAME
    if local_config_path.exists():
        config = load_config_file(local_config_path)
        table = config.get("tool", {}).get(TOOL_KEY)
        if table is not None:
            return table

    pyproject_path = PROJECT_ROOT / "pyproject.toml"
    if pyproject_path.exists():
        config = load_config_file(pyproject_path)
        return config.get("tool", {}).get(TOOL_KEY, {})

    return {}


def _clean_env(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    if not value or value in PLACEHOLDER_TOKENS:
        return None
    return value


def get_github_token() -> str | None:
    """
    Get the statically configured GitHub token (GITHUB_TOKEN).

    Returns:
        The token, or None if unset or still a placeholder value.
    """
    return _clean_env("GITHUB_TOKEN")


def get_oauth_client_id() -> str | None:
    """OAuth App client id from GITHUB_OAUTH_CLIENT_ID or [oauth].client_id."""
    return _clean_env("GITHUB_OAUTH_CLIENT_ID") or (
        get_tool_config().get("oauth", {}).get("client_id") or None
    )


def get_oauth_proxy_url() -> str | None:
    """Code-for-token exchange proxy from GITHUB_OAUTH_PROXY or [oauth].proxy_url."""
    return _clean_env("GITHUB_OAUTH_PROXY") or (
        get_tool_config().get("oauth", {}).get("proxy_url") or None
    )


def get_oauth_redirect_uri() -> str:
    """Redirect URI registered with the OAuth App."""
    return (
        _clean_env("GITHUB_OAUTH_REDIRECT_URI")
        or get_tool_config().get("oauth", {}).get("redirect_uri")
        or "http://localhost:8000/"
    )


def get_request_timeout() -> float:
    """Per-request timeout in seconds."""
    value = get_tool_config().get("request_timeout")
    if value is None:
        return DEFAULT_REQUEST_TIMEOUT
    return float(value)


def set_verify_ssl(verify: bool) -> None:
    """
    Set the SSL verification setting globally.

    Args:
        verify: Whether to verify SSL certificates.
    """
    global VERIFY_SSL
    VERIFY_SSL = verify


def get_verify_ssl() -> bool:
    """
    Get the current SSL verification setting.

    Returns:
        Whether SSL verification is enabled.
    """
    return VERIFY_SSL


def set_verbose(verbose: bool) -> None:
    """Enable or disable verbose diagnostics."""
    global _VERBOSE
    _VERBOSE = verbose


def is_verbose_enabled() -> bool:
    """
    Check whether verbose diagnostics are enabled.

    Priority:
    1. Explicitly set value via set_verbose()
    2. `verbose` key in config
    3. Default: False
    """
    if _VERBOSE is not None:
        return _VERBOSE
    return bool(get_tool_config().get("verbose", False))


def get_cache_dir() -> Path:
    """
    Get the cache directory path.

    Priority:
    1. Explicitly set value via set_cache_dir()
    2. TUNE_MY_REPOS_CACHE_DIR environment variable
    3. [cache].directory in config
    4. Default: ~/.cache/tune-my-repos

    Returns:
        Path to the cache directory.
    """
    if _CACHE_DIR is not None:
        return _CACHE_DIR

    env_cache_dir = os.getenv("TUNE_MY_REPOS_CACHE_DIR")
    if env_cache_dir:
        return Path(env_cache_dir).expanduser()

    cache_config = get_tool_config().get("cache", {})
    if "directory" in cache_config:
        return Path(cache_config["directory"]).expanduser()

    return DEFAULT_CACHE_DIR


def set_cache_dir(path: Path | str) -> None:
    """
    Set the cache directory path explicitly.

    Args:
        path: Path to the cache directory.
    """
    global _CACHE_DIR
    _CACHE_DIR = Path(path).expanduser()


def get_cache_ttl() -> int:
    """
    Get the cache TTL (Time To Live) in seconds.

    Priority:
    1. Explicitly set value via set_cache_ttl()
    2. TUNE_MY_REPOS_CACHE_TTL environment variable
    3. [cache].ttl_seconds in config
    4. Default: 3600 (1 hour)

    Returns:
        TTL in seconds.
    """
    if _CACHE_TTL is not None:
        return _CACHE_TTL

    env_cache_ttl = os.getenv("TUNE_MY_REPOS_CACHE_TTL")
    if env_cache_ttl:
        try:
            return int(env_cache_ttl)
        except ValueError:
            pass

    cache_config = get_tool_config().get("cache", {})
    if "ttl_seconds" in cache_config:
        return int(cache_config["ttl_seconds"])

    return DEFAULT_CACHE_TTL


def set_cache_ttl(seconds: int) -> None:
    """
    Set the cache TTL (Time To Live) explicitly.

    Args:
        seconds: TTL in seconds.
    """
    global _CACHE_TTL
    _CACHE_TTL = seconds


def is_cache_enabled() -> bool:
    """
    Check if cache is enabled.

    Priority:
    1. [cache].enabled in config
    2. Default: True
    """
    cache_config = get_tool_config().get("cache", {})
    if "enabled" in cache_config:
        return bool(cache_config["enabled"])
    return True


def parse_priority_config(table: dict[str, Any]) -> PriorityConfig:
    """
    Build a PriorityConfig from a `priorities` table.

    Args:
        table: Mapping with optional `sort_strategy`, `top_count` and `entries`.

    Returns:
        The parsed PriorityConfig.

    Raises:
        ConfigurationError: If the sort strategy or an entry is invalid.
    """
    strategy_value = table.get("sort_strategy", SortStrategy.SEVERITY.value)
    try:
        strategy = SortStrategy(strategy_value)
    except ValueError:
        allowed = ", ".join(s.value for s in SortStrategy)
        raise ConfigurationError(
            f"Invalid sort_strategy '{strategy_value}'. Expected one of: {allowed}"
        ) from None

    entries = []
    for raw in table.get("entries", []):
        if "title" not in raw or "priority" not in raw:
            raise ConfigurationError(
                f"Priority entry needs 'title' and 'priority': {raw!r}"
            )
        entries.append(
            PriorityEntry(
                title=raw["title"],
                priority=int(raw["priority"]),
                optional_in_top=bool(raw.get("optional_in_top", False)),
            )
        )

    return PriorityConfig(
        entries=entries,
        top_count=int(table.get("top_count", DEFAULT_TOP_COUNT)),
        sort_strategy=strategy,
    )


def load_priority_config(path: Path | None = None) -> PriorityConfig | None:
    """
    Load the finding priority table.

    Args:
        path: Optional standalone TOML file whose top-level (or [priorities]
            table) holds the priority settings. Falls back to the
            [tool.tune-my-repos.priorities] table of the project config.

    Returns:
        The PriorityConfig, or None when nothing is configured.
    """
    if path is not None:
        data = load_config_file(Path(path))
        if not data:
            raise ConfigurationError(f"Priority file not found or empty: {path}")
        return parse_priority_config(data.get("priorities", data))

    table = get_tool_config().get("priorities")
    if not table:
        return None
    return parse_priority_config(table)
