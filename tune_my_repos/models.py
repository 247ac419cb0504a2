"""
Shared data types for repository analysis.
"""

from enum import Enum
from typing import Any, Iterable, NamedTuple, Sequence


class Severity(str, Enum):
    """Finding severity, most urgent first."""

    CRITICAL = "critical"
    IMPORTANT = "important"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [
    Severity.CRITICAL,
    Severity.IMPORTANT,
    Severity.RECOMMENDED,
    Severity.OPTIONAL,
]


class Classification(str, Enum):
    """Heuristic repository type."""

    LIBRARY = "library"
    WEBAPP = "webapp"
    CLI = "cli"
    DOCS = "docs"
    CONFIG = "config"
    MIXED = "mixed"


class MaturityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AccountType(str, Enum):
    USER = "User"
    ORGANIZATION = "Organization"


class SortStrategy(str, Enum):
    PRIORITY = "priority"
    SEVERITY = "severity"


class SyncStatus(str, Enum):
    UNKNOWN = "unknown"


class RepositoryIdentity(NamedTuple):
    """Owner/name pair identifying a repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> "RepositoryIdentity":
        """Parse 'owner/repo'. Extra path segments are ignored."""
        parts = value.strip().split("/")
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Expected 'owner/repo', got '{value}'")
        return cls(parts[0], parts[1])


class RepositoryMetadata(NamedTuple):
    """Snapshot of GET /repos/{owner}/{repo}."""

    default_branch: str
    is_fork: bool = False
    parent_full_name: str | None = None
    description: str | None = None
    homepage: str | None = None
    topics: Sequence[str] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RepositoryMetadata":
        parent = data.get("parent") or {}
        return cls(
            default_branch=data.get("default_branch") or "main",
            is_fork=bool(data.get("fork", False)),
            parent_full_name=parent.get("full_name"),
            description=data.get("description"),
            homepage=data.get("homepage"),
            topics=list(data.get("topics") or []),
        )


class FileTree:
    """Every blob path of the default branch, repository-root relative."""

    __slots__ = ("paths",)

    def __init__(self, paths: Iterable[str]):
        self.paths = frozenset(paths)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "FileTree":
        return cls(item["path"] for item in data.get("tree", []))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FileTree) and other.paths == self.paths

    def __hash__(self) -> int:
        return hash(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def contains_any(self, candidates: Iterable[str]) -> bool:
        return any(c in self.paths for c in candidates)

    def has_prefix(self, *prefixes: str) -> bool:
        return any(p.startswith(prefixes) for p in self.paths)

    def paths_with_suffix(self, *suffixes: str) -> list[str]:
        return [p for p in self.paths if p.endswith(suffixes)]

    @staticmethod
    def governance_variants(filename: str) -> list[str]:
        """
        Name variants under which a governance file counts as present.

        Exact, lowercase, `.github/` exact and `.github/` lowercase; for `.md`
        names the same four with a `.rst` extension.
        """
        names = [filename]
        if filename.endswith(".md"):
            names.append(filename[: -len(".md")] + ".rst")

        variants = []
        for name in names:
            variants.extend(
                [name, name.lower(), f".github/{name}", f".github/{name.lower()}"]
            )
        return variants


class Finding(NamedTuple):
    """A single rubric violation."""

    category: str
    severity: Severity
    title: str
    description: str
    recommendation: str
    automatable: bool = False
    time_estimate: str = "15–45 minutes"
    requires_write_access: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "recommendation": self.recommendation,
            "automated": self.automatable,
            "time_estimate": self.time_estimate,
            "requires_write_access": self.requires_write_access,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        return cls(
            category=data["category"],
            severity=Severity(data["severity"]),
            title=data["title"],
            description=data["description"],
            recommendation=data["recommendation"],
            automatable=bool(data.get("automated", False)),
            time_estimate=data.get("time_estimate", "15–45 minutes"),
            requires_write_access=bool(data.get("requires_write_access", True)),
        )


class ForkStatus(NamedTuple):
    is_fork: bool = False
    upstream_full_name: str | None = None
    sync_status: SyncStatus | None = None


def count_by_severity(findings: Iterable[Finding]) -> dict[str, int]:
    counts = {severity.value: 0 for severity in Severity}
    for finding in findings:
        counts[finding.severity.value] += 1
    return counts


def calculate_maturity(findings: Iterable[Finding]) -> MaturityLevel:
    """
    Derive the maturity level from findings.

    - Any critical finding: low
    - More than two important findings: medium
    - Otherwise: high
    """
    counts = count_by_severity(findings)
    if counts[Severity.CRITICAL.value] > 0:
        return MaturityLevel.LOW
    if counts[Severity.IMPORTANT.value] > 2:
        return MaturityLevel.MEDIUM
    return MaturityLevel.HIGH


class AnalysisResult(NamedTuple):
    """The result of analyzing one repository."""

    repository: RepositoryIdentity
    analyzed_at: str
    classification: Classification
    fork: ForkStatus
    findings: list[Finding]
    limitations: list[str]
    file_count: int = 0

    @property
    def maturity_level(self) -> MaturityLevel:
        return calculate_maturity(self.findings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository": self.repository.full_name,
            "analyzed_at": self.analyzed_at,
            "classification": self.classification.value,
            "is_fork": self.fork.is_fork,
            "fork_upstream": self.fork.upstream_full_name,
            "fork_status": self.fork.sync_status.value
            if self.fork.sync_status
            else None,
            "maturity_level": self.maturity_level.value,
            "findings": [finding.to_dict() for finding in self.findings],
            "metrics": {
                "file_count": self.file_count,
                "findings_by_severity": count_by_severity(self.findings),
            },
            "limitations": list(self.limitations),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        fork_status = data.get("fork_status")
        return cls(
            repository=RepositoryIdentity.parse(data["repository"]),
            analyzed_at=data["analyzed_at"],
            classification=Classification(data["classification"]),
            fork=ForkStatus(
                is_fork=bool(data.get("is_fork", False)),
                upstream_full_name=data.get("fork_upstream"),
                sync_status=SyncStatus(fork_status) if fork_status else None,
            ),
            findings=[Finding.from_dict(f) for f in data.get("findings", [])],
            limitations=list(data.get("limitations", [])),
            file_count=data.get("metrics", {}).get("file_count", 0),
        )


class AnalysisStats(NamedTuple):
    succeeded: int
    failed: int
    total: int
    skipped_forks: int = 0


class PriorityEntry(NamedTuple):
    title: str
    priority: int
    optional_in_top: bool = False


class PriorityConfig(NamedTuple):
    """Externally supplied display priorities for findings."""

    entries: Sequence[PriorityEntry] = ()
    top_count: int = 3
    sort_strategy: SortStrategy = SortStrategy.SEVERITY

    def entry_for(self, title: str) -> PriorityEntry | None:
        for entry in self.entries:
            if entry.title == title:
                return entry
        return None
