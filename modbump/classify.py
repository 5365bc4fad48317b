"""Commit classification.

Turns a module's commits into the single severity it starts the cascade
with. The reduction is a max over a total order, so commit order never
matters.
"""

from __future__ import annotations

from collections.abc import Iterable

from .config import VersionRules, severity_for_rule
from .models import BumpSeverity, Commit


def bump_for_commit(commit: Commit, rules: VersionRules) -> BumpSeverity:
    """Determine the severity a single commit asks for.

    Breaking commits are always MAJOR. Other commits are looked up by type;
    "ignore" resolves to NONE and unmapped types use the default bump.
    """
    if commit.breaking:
        return BumpSeverity.MAJOR
    rule = rules.commit_type_bumps.get(commit.type or "unknown", rules.default_bump)
    return severity_for_rule(rule)


def bump_from_commits(commits: Iterable[Commit], rules: VersionRules) -> BumpSeverity:
    """Highest severity across commits, NONE when there is nothing to bump."""
    return max(
        (bump_for_commit(c, rules) for c in commits),
        default=BumpSeverity.NONE,
    )
