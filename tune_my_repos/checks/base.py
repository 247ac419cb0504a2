"""
Shared check types and context helpers.
"""

from typing import Callable, NamedTuple, Sequence

from tune_my_repos.models import FileTree, Finding, RepositoryMetadata
from tune_my_repos.org_inheritance import OrgInheritanceResolver


class CheckContext(NamedTuple):
    """Context provided to rubric checks."""

    owner: str
    name: str
    files: FileTree
    metadata: RepositoryMetadata
    org: OrgInheritanceResolver | None = None
    has_org_github: bool = False


class CheckOutcome(NamedTuple):
    """Findings and limitation notes produced by one check."""

    findings: Sequence[Finding] = ()
    limitations: Sequence[str] = ()


class CheckSpec(NamedTuple):
    """Specification for a rubric check."""

    name: str
    checker: Callable[[CheckContext], CheckOutcome]
    progress: str | None = None
