"""Heuristic repository classification."""

from tune_my_repos.models import Classification, FileTree, RepositoryMetadata

WEB_ENTRY_FILES = ("package.json", "index.html")
WEB_ASSET_PREFIXES = ("public/", "static/", "templates/")
CLI_PREFIXES = ("cmd/", "cli/")
PYTHON_MANIFESTS = ("setup.py", "pyproject.toml")
PACKAGE_MANIFESTS = ("setup.py", "pyproject.toml", "package.json", "Cargo.toml")
DOC_SUFFIXES = (".md", ".rst")
SOURCE_SUFFIXES = (".py", ".js", ".go", ".rs")
AGENT_INSTRUCTIONS = "AGENTS.md"

DOCS_SHARE = 0.7
CONFIG_MAX_SOURCE_FILES = 5


def classify_repository(
    files: FileTree, metadata: RepositoryMetadata | None = None
) -> Classification:
    """
    Classify a repository from its file tree.

    Rules are evaluated in order and the first match wins; a repository
    can satisfy several of them.

    1. webapp: package.json or index.html plus public/, static/ or templates/
    2. cli: cmd/ or cli/ paths, or a Python manifest with a __main__.py path
    3. library: any Python, Node or Rust package manifest
    4. docs: Markdown/reStructuredText make up at least 70% of files
    5. config: AGENTS.md or CI workflows, with fewer than 5 source files
    6. mixed: everything else

    Args:
        files: Blob paths of the default branch.
        metadata: Repository metadata (currently unused by the rules).

    Returns:
        The Classification.
    """
    if files.contains_any(WEB_ENTRY_FILES) and files.has_prefix(*WEB_ASSET_PREFIXES):
        return Classification.WEBAPP

    if files.has_prefix(*CLI_PREFIXES):
        return Classification.CLI
    if files.contains_any(PYTHON_MANIFESTS) and any(
        "__main__.py" in path for path in files.paths
    ):
        return Classification.CLI

    if files.contains_any(PACKAGE_MANIFESTS):
        return Classification.LIBRARY

    doc_files = files.paths_with_suffix(*DOC_SUFFIXES)
    if len(doc_files) >= len(files) * DOCS_SHARE:
        return Classification.DOCS

    if AGENT_INSTRUCTIONS in files or files.has_prefix(".github/workflows"):
        if len(files.paths_with_suffix(*SOURCE_SUFFIXES)) < CONFIG_MAX_SOURCE_FILES:
            return Classification.CONFIG

    return Classification.MIXED
