"""
Cache management for tune-my-repos.

Stores batch (or single repository) analysis results on disk so a repeated run
for the same target within the TTL needs no API calls. One gzip-compressed JSON
file per (target, skip-forks) pair.
"""

import gzip
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NamedTuple

from rich.console import Console

from tune_my_repos.config import get_cache_dir, get_cache_ttl, is_verbose_enabled
from tune_my_repos.models import AnalysisResult, AnalysisStats

console = Console()

CACHE_SUFFIX = ".json.gz"
STATS_FILE = "_stats.json.gz"
ENTRY_VERSION = "1.0"


class CachedAnalysis(NamedTuple):
    results: list[AnalysisResult]
    stats: AnalysisStats | None
    fetched_at: datetime
    age_seconds: float


def normalize_target(target: str) -> str:
    return target.strip().lower()


def _cache_key(target: str, skip_forks: bool) -> str:
    """File stem for a target; `/` becomes `~`, which GitHub names never contain."""
    normalized = normalize_target(target).replace("/", "~")
    return f"{normalized}-skipforks-{str(skip_forks).lower()}"


def _get_cache_path(target: str, skip_forks: bool) -> Path:
    return get_cache_dir() / f"{_cache_key(target, skip_forks)}{CACHE_SUFFIX}"


def _entry_files(cache_dir: Path) -> list[Path]:
    return sorted(p for p in cache_dir.glob(f"*{CACHE_SUFFIX}") if p.name != STATS_FILE)


def _read_json(path: Path) -> Any:
    with gzip.open(path, "rt", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with gzip.open(path, "wt", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)


def _entry_age_seconds(entry: dict[str, Any]) -> float | None:
    metadata = entry.get("cache_metadata")
    if not isinstance(metadata, dict) or "fetched_at" not in metadata:
        return None
    try:
        fetched_at = datetime.fromisoformat(metadata["fetched_at"])
    except (ValueError, TypeError):
        return None
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=timezone.utc)
    return (datetime.now(timezone.utc) - fetched_at).total_seconds()


def is_cache_valid(entry: dict[str, Any]) -> bool:
    """
    Check if a cache entry is still within its TTL and has the current format.

    Args:
        entry: Cache entry dict with cache_metadata and entry_version.

    Returns:
        True if the entry can be served.
    """
    if not isinstance(entry, dict) or entry.get("entry_version") != ENTRY_VERSION:
        return False
    age = _entry_age_seconds(entry)
    if age is None:
        return False
    ttl_seconds = entry["cache_metadata"].get("ttl_seconds", get_cache_ttl())
    return age < ttl_seconds


def _load_stats() -> dict[str, int]:
    stats_path = get_cache_dir() / STATS_FILE
    if not stats_path.exists():
        return {"hits": 0, "sets": 0}
    try:
        data = _read_json(stats_path)
        return {"hits": int(data.get("hits", 0)), "sets": int(data.get("sets", 0))}
    except (OSError, ValueError, AttributeError):
        return {"hits": 0, "sets": 0}


def _bump_stat(name: str) -> None:
    stats = _load_stats()
    stats[name] = stats.get(name, 0) + 1
    try:
        _write_json(get_cache_dir() / STATS_FILE, stats)
    except OSError:
        pass


def get_cached_results(target: str, skip_forks: bool) -> CachedAnalysis | None:
    """
    Load cached results for a target.

    Expired or unreadable entries are deleted and count as a miss.

    Args:
        target: User, organization or owner/repo as typed by the user.
        skip_forks: The skip-forks flag of the run.

    Returns:
        CachedAnalysis, or None on a miss.
    """
    cache_path = _get_cache_path(target, skip_forks)
    if not cache_path.exists():
        return None

    try:
        entry = _read_json(cache_path)
    except (ValueError, OSError):
        delete_cached_results(target, skip_forks)
        return None

    if not isinstance(entry, dict):
        delete_cached_results(target, skip_forks)
        return None

    if entry.get("target") != normalize_target(target):
        return None

    if not is_cache_valid(entry):
        if is_verbose_enabled():
            console.print(f"[dim]Cache expired for {target}[/dim]")
        delete_cached_results(target, skip_forks)
        return None

    try:
        results = [AnalysisResult.from_dict(r) for r in entry.get("results", [])]
        raw_stats = entry.get("analysis_stats")
        stats = AnalysisStats(**raw_stats) if raw_stats else None
    except (AttributeError, KeyError, ValueError, TypeError):
        delete_cached_results(target, skip_forks)
        return None

    fetched_at = datetime.fromisoformat(entry["cache_metadata"]["fetched_at"])
    age = _entry_age_seconds(entry) or 0.0

    _bump_stat("hits")
    if is_verbose_enabled():
        console.print(f"[dim]Cache hit for {target} (age: {round(age / 60)} minutes)[/dim]")
    return CachedAnalysis(results, stats, fetched_at, age)


def save_results(
    target: str,
    skip_forks: bool,
    results: list[AnalysisResult],
    stats: AnalysisStats | None = None,
) -> bool:
    """
    Store the results of a run.

    Returns:
        True if written; False if the cache directory is not writable.
    """
    entry = {
        "entry_version": ENTRY_VERSION,
        "target": normalize_target(target),
        "skip_forks": skip_forks,
        "results": [result.to_dict() for result in results],
        "analysis_stats": stats._asdict() if stats is not None else None,
        "cache_metadata": {
            "fetched_at": datetime.now(timezone.utc).isoformat(),
            "ttl_seconds": get_cache_ttl(),
        },
    }
    try:
        _write_json(_get_cache_path(target, skip_forks), entry)
    except OSError as e:
        console.print(f"[yellow]⚠️  Failed to cache results: {e}[/yellow]")
        return False

    _bump_stat("sets")
    if is_verbose_enabled():
        console.print(f"    [dim]💾 Cached results for {target} (skip forks: {skip_forks})[/dim]")
    return True


def delete_cached_results(target: str, skip_forks: bool) -> bool:
    cache_path = _get_cache_path(target, skip_forks)
    try:
        cache_path.unlink(missing_ok=True)
    except OSError:
        return False
    return True


def clear_cache() -> int:
    """
    Remove every cached entry and reset the hit/set counters.

    Returns:
        Number of entries removed.
    """
    cache_dir = get_cache_dir()
    if not cache_dir.exists():
        return 0

    cleared = 0
    for cache_file in _entry_files(cache_dir):
        cache_file.unlink()
        cleared += 1
    (cache_dir / STATS_FILE).unlink(missing_ok=True)
    return cleared


def clear_expired_cache() -> int:
    """
    Remove expired and unreadable entries, keeping valid ones.

    Returns:
        Number of entries removed.
    """
    cache_dir = get_cache_dir()
    if not cache_dir.exists():
        return 0

    cleaned = 0
    for cache_file in _entry_files(cache_dir):
        try:
            valid = is_cache_valid(_read_json(cache_file))
        except (ValueError, OSError):
            valid = False
        if not valid:
            cache_file.unlink(missing_ok=True)
            cleaned += 1
    return cleaned


def list_cached() -> list[dict[str, Any]]:
    """
    Describe every cached entry.

    Returns:
        List of dicts with keys target, skip_forks, repositories, fetched_at
        and is_valid.
    """
    cache_dir = get_cache_dir()
    if not cache_dir.exists():
        return []

    entries = []
    for cache_file in _entry_files(cache_dir):
        try:
            entry = _read_json(cache_file)
        except (ValueError, OSError):
            continue
        if not isinstance(entry, dict):
            continue
        entries.append(
            {
                "target": entry.get("target", "unknown"),
                "skip_forks": bool(entry.get("skip_forks", False)),
                "repositories": len(entry.get("results", [])),
                "fetched_at": entry.get("cache_metadata", {}).get("fetched_at", "unknown"),
                "is_valid": is_cache_valid(entry),
            }
        )
    return entries


def get_cache_stats() -> dict[str, Any]:
    """
    Get cache statistics.

    Returns:
        Dictionary with the cache directory, hit/set counters and entry counts.
    """
    cache_dir = get_cache_dir()
    if not cache_dir.exists():
        return {
            "cache_dir": str(cache_dir),
            "exists": False,
            "hits": 0,
            "sets": 0,
            "size": 0,
            "valid_entries": 0,
            "expired_entries": 0,
        }

    entries = list_cached()
    valid = sum(1 for entry in entries if entry["is_valid"])
    counters = _load_stats()
    return {
        "cache_dir": str(cache_dir),
        "exists": True,
        "hits": counters["hits"],
        "sets": counters["sets"],
        "size": len(entries),
        "valid_entries": valid,
        "expired_entries": len(entries) - valid,
    }
