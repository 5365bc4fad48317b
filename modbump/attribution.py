"""Commit attribution across nested modules.

A commit touching core/api/ also lives under core/ and under the root.
To count it once, each module's log query excludes the directories of all
modules nested below it, so the commit is attributed to the innermost
module only.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Module

ROOT_PATH = "."


def is_descendant(path: str, parent: str) -> bool:
    """Check whether path lies strictly below parent.

    The root path is the parent of every other path. Otherwise path must
    start with parent followed by a separator, so "core2" is not below
    "core" but "core/api" is.
    """
    if parent == ROOT_PATH:
        return path != ROOT_PATH
    return path.startswith(parent.rstrip("/") + "/")


def excluded_paths(module: Module, modules: Iterable[Module]) -> list[str]:
    """Paths of all modules nested below module, in input order."""
    return [
        other.path
        for other in modules
        if other.id != module.id and is_descendant(other.path, module.path)
    ]


def attribution_plan(modules: Iterable[Module]) -> dict[str, tuple[str, list[str]]]:
    """Map module id → (include path, exclude paths) for every module.

    This is the full set of path parameters a commit source needs to fetch
    each module's own commits.
    """
    modules = list(modules)
    return {m.id: (m.path, excluded_paths(m, modules)) for m in modules}
