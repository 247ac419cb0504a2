"""
Rubric check registry.

Each module listed in _BUILTIN_MODULES exposes a module-level CHECK
(a CheckSpec). Checks are independent and own disjoint finding titles.
"""

from importlib import import_module

from tune_my_repos.checks.base import CheckContext, CheckOutcome, CheckSpec

__all__ = [
    "CheckContext",
    "CheckOutcome",
    "CheckSpec",
    "load_check_specs",
]

_BUILTIN_MODULES = [
    "tune_my_repos.checks.governance",
    "tune_my_repos.checks.readme",
    "tune_my_repos.checks.about",
    "tune_my_repos.checks.ci_workflows",
    "tune_my_repos.checks.community",
    "tune_my_repos.checks.dependencies",
]


def _load_builtin_check_specs() -> list[CheckSpec]:
    specs = []
    for module_path in _BUILTIN_MODULES:
        module = import_module(module_path)
        spec = getattr(module, "CHECK", None)
        if isinstance(spec, CheckSpec):
            specs.append(spec)
    return specs


def load_check_specs() -> list[CheckSpec]:
    """
    Load all rubric checks in registry order.

    Returns:
        List of CheckSpec, deduplicated by name (first wins).
    """
    specs = []
    seen = set()
    for spec in _load_builtin_check_specs():
        if spec.name in seen:
            continue
        seen.add(spec.name)
        specs.append(spec)
    return specs
