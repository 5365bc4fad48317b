"""Version rule configuration.

Maps commit types to bump rules and defines how bumps transfer from a
module to the modules it affects. The "ignore" rule only exists at this
layer: everything handed to the classifier and cascade is a BumpSeverity.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .models import BumpSeverity

BumpRule = Literal["major", "minor", "patch", "none"]
CommitTypeRule = Literal["major", "minor", "patch", "none", "ignore"]

DEFAULT_COMMIT_TYPE_BUMPS: dict[str, CommitTypeRule] = {
    "feat": "minor",
    "fix": "patch",
    "perf": "patch",
    "refactor": "patch",
    "docs": "ignore",
    "test": "ignore",
    "chore": "ignore",
    "style": "ignore",
    "ci": "ignore",
    "build": "ignore",
}


class DependencyBumps(BaseModel):
    """Bump applied to an affected module for each source severity."""

    model_config = ConfigDict(extra="forbid")

    major: BumpRule = "major"
    minor: BumpRule = "minor"
    patch: BumpRule = "patch"


class VersionRules(BaseModel):
    """Commit classification and dependency transfer rules.

    Attributes:
        default_bump: Bump for commit types missing from commit_type_bumps.
        commit_type_bumps: Commit type → bump rule; "ignore" drops the commit.
        dependency_bumps: Transfer table used by the cascade.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    default_bump: BumpRule = Field(default="patch", alias="default-bump")
    commit_type_bumps: dict[str, CommitTypeRule] = Field(
        default_factory=lambda: dict(DEFAULT_COMMIT_TYPE_BUMPS),
        alias="commit-types",
    )
    dependency_bumps: DependencyBumps = Field(
        default_factory=DependencyBumps, alias="dependency-bumps"
    )


def build_rules(user: dict[str, Any] | None) -> VersionRules:
    """Validate user configuration, merged over the defaults.

    commit-types and dependency-bumps are merged per key so a config file
    only has to mention what it changes.

    Raises:
        pydantic.ValidationError: If any rule value or key is invalid.
    """
    if not user:
        return VersionRules()

    data = dict(user)
    commit_types = data.get("commit-types", data.get("commit_type_bumps"))
    if isinstance(commit_types, dict):
        data.pop("commit_type_bumps", None)
        data["commit-types"] = {**DEFAULT_COMMIT_TYPE_BUMPS, **commit_types}
    dep_bumps = data.get("dependency-bumps", data.get("dependency_bumps"))
    if isinstance(dep_bumps, dict):
        data.pop("dependency_bumps", None)
        data["dependency-bumps"] = {**DependencyBumps().model_dump(), **dep_bumps}
    return VersionRules.model_validate(data)


def severity_for_rule(rule: str) -> BumpSeverity:
    """Resolve a configured rule to a severity ("ignore" → NONE)."""
    if rule == "ignore":
        return BumpSeverity.NONE
    return BumpSeverity.from_name(rule)


def dependency_transfer(severity: BumpSeverity, rules: VersionRules) -> BumpSeverity:
    """Severity an affected module receives when its source bumps by severity.

    NONE is never a cascade source and always transfers NONE.
    """
    table = rules.dependency_bumps
    if severity == BumpSeverity.MAJOR:
        return severity_for_rule(table.major)
    if severity == BumpSeverity.MINOR:
        return severity_for_rule(table.minor)
    if severity == BumpSeverity.PATCH:
        return severity_for_rule(table.patch)
    return BumpSeverity.NONE
