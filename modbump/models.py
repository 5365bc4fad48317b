"""Data models for modbump.

These Pydantic models represent the core data structures used throughout
the version calculation: the module graph handed over by an adapter, the
commits fetched for each module, and the per-module change records that
flow from classification through cascade to formatting.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BumpSeverity(IntEnum):
    """Ordered bump magnitude: NONE < PATCH < MINOR < MAJOR."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @classmethod
    def from_name(cls, name: str) -> BumpSeverity:
        """Look up a severity by its config name ("major", "none", ...)."""
        return cls[name.upper()]

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


class ChangeReason(str, Enum):
    """Why a module ended up in the result set."""

    COMMITS = "commits"
    DEPENDENCY_CASCADE = "dependency-cascade"
    PRERELEASE_UNCHANGED = "prerelease-unchanged"
    BUILD_METADATA = "build-metadata"
    SNAPSHOT_SUFFIX = "snapshot-suffix"

    def __str__(self) -> str:
        return self.value


class Module(BaseModel):
    """A single module of the repository, as discovered by an adapter.

    Attributes:
        id: Unique, hierarchical identifier (e.g. ":core:api").
        name: Short module name, used for tag lookup.
        path: Path relative to the repository root, "." for the root.
        type: "root" for the repository root module, "module" otherwise.
        affected_modules: Ids of modules that a change here propagates to.
        version: Current version string.
        declared_version: Whether the module declares its own version or
                          inherits one.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    path: str
    type: Literal["root", "module"] = "module"
    affected_modules: frozenset[str] = Field(
        default_factory=frozenset, alias="affects"
    )
    version: str
    declared_version: bool = Field(default=True, alias="declared-version")


class Commit(BaseModel):
    """A parsed commit attributed to exactly one module."""

    model_config = ConfigDict(frozen=True)

    hash: str
    type: str
    scope: str | None = None
    subject: str
    body: str | None = None
    breaking: bool = False


class BumpOptions(BaseModel):
    """Run mode flags consumed by the calculation.

    Attributes:
        prerelease_mode: Produce prerelease versions instead of releases.
        prerelease_id: Identifier used for prerelease tags (e.g. "alpha").
        bump_unchanged: In prerelease mode, also bump modules without changes.
        add_build_metadata: Append the short commit id as build metadata.
        append_snapshot: Append the snapshot suffix to every version.
        supports_snapshots: Adapter capability flag gating append_snapshot.
        timestamp_versions: In prerelease mode, stamp the prerelease id with
                            the current UTC date and time.
    """

    prerelease_mode: bool = False
    prerelease_id: str = "alpha"
    bump_unchanged: bool = False
    add_build_metadata: bool = False
    append_snapshot: bool = False
    supports_snapshots: bool = False
    timestamp_versions: bool = False


class ModuleChange(BaseModel):
    """Working record for one module during a calculation run.

    Created once per module with the classified severity, then mutated in
    place by the cascade. Only the bump, reason and needs_processing fields
    change; to_version is filled in by formatting.
    """

    module: Module
    from_version: str
    to_version: str = ""
    bump: BumpSeverity = BumpSeverity.NONE
    reason: ChangeReason | None = None
    needs_processing: bool = False


class ProcessedModuleChange(BaseModel):
    """Frozen result record for a module whose version changes."""

    model_config = ConfigDict(frozen=True)

    module: Module
    from_version: str
    to_version: str
    bump: BumpSeverity
    reason: ChangeReason
