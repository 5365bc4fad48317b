"""Version calculation: commits → classify → cascade → format.

This module orchestrates a single calculation run:
1. Fetch each module's own commits (attribution excludes nested modules)
2. Classify commits into an initial bump per module
3. Mark modules forced in by prerelease or build metadata modes
4. Cascade bumps along the module graph to a fixed point
5. Format the next version string for every module that needs one

Steps 2-5 are pure and operate on already-fetched commits, so they can be
exercised without git. A run either returns the complete list of changes
or raises; nothing partially cascaded escapes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from pathlib import Path

from .attribution import attribution_plan
from .classify import bump_from_commits
from .config import VersionRules
from .git import get_commits_since_last_tag, get_current_short_sha
from .graph import propagate_cascade, validate_graph
from .models import (
    BumpOptions,
    BumpSeverity,
    ChangeReason,
    Commit,
    Module,
    ModuleChange,
    ProcessedModuleChange,
)
from .shell import step, warn
from .versions import (
    add_build_metadata,
    apply_snapshot_suffix,
    bump_prerelease,
    bump_release,
    parse_version,
    timestamp_prerelease_id,
)

CommitSource = Callable[[Module, list[str]], list[Commit]]


def fetch_module_commits(
    modules: Sequence[Module], source: CommitSource
) -> dict[str, list[Commit]]:
    """Fetch commits for every module, excluding nested module paths.

    A failing source call is treated as "no commits" for that module.

    Returns:
        Map of module id → commits attributed to that module.
    """
    step("Analyzing commits since last release")

    plan = attribution_plan(modules)
    module_commits: dict[str, list[Commit]] = {}
    for module in modules:
        _, excludes = plan[module.id]
        try:
            commits = source(module, excludes)
        except Exception as exc:
            warn(f"could not fetch commits for {module.id}: {exc}")
            commits = []
        module_commits[module.id] = commits

        skipped = f" (excluding {', '.join(excludes)})" if excludes else ""
        print(f"  {module.id}: {len(commits)} commits{skipped}")

    return module_commits


def initial_changes(
    modules: Sequence[Module],
    module_commits: Mapping[str, Sequence[Commit]],
    rules: VersionRules,
    options: BumpOptions,
) -> tuple[list[ModuleChange], dict[str, int]]:
    """Create the per-module change arena with classified bumps.

    Modules with a bump start with reason "commits". Otherwise prerelease
    mode with bump_unchanged, then build metadata mode, force the module
    into processing without giving it a bump.

    Returns:
        Tuple of (change records, module id → position in the records).
    """
    changes: list[ModuleChange] = []
    index: dict[str, int] = {}

    for module in modules:
        bump = bump_from_commits(module_commits.get(module.id, []), rules)
        change = ModuleChange(module=module, from_version=module.version, bump=bump)

        if bump != BumpSeverity.NONE:
            change.needs_processing = True
            change.reason = ChangeReason.COMMITS
        elif options.prerelease_mode and options.bump_unchanged:
            change.needs_processing = True
            change.reason = ChangeReason.PRERELEASE_UNCHANGED
        elif options.add_build_metadata:
            change.needs_processing = True
            change.reason = ChangeReason.BUILD_METADATA

        index[module.id] = len(changes)
        changes.append(change)

    return changes, index


def next_version(
    change: ModuleChange,
    options: BumpOptions,
    prerelease_id: str,
    build_metadata: str | None,
) -> str:
    """Compute the version string a processed module moves to.

    Unchanged versions are returned verbatim rather than re-rendered.

    Raises:
        ValueError: If the module's current version is not valid semver.
    """
    version = parse_version(change.from_version, change.module.id)
    bumped = version

    if change.bump != BumpSeverity.NONE and options.prerelease_mode:
        bumped = bump_prerelease(version, change.bump, prerelease_id)
    elif change.bump != BumpSeverity.NONE:
        bumped = bump_release(version, change.bump)
    elif change.reason == ChangeReason.PRERELEASE_UNCHANGED:
        bumped = bump_prerelease(version, BumpSeverity.NONE, prerelease_id)

    if options.add_build_metadata and build_metadata:
        bumped = add_build_metadata(bumped, build_metadata)

    if bumped is version:
        return change.from_version
    return str(bumped)


def format_changes(
    changes: Sequence[ModuleChange],
    options: BumpOptions,
    prerelease_id: str,
    build_metadata: str | None = None,
) -> list[ProcessedModuleChange]:
    """Fill in to_version for every module and freeze the processed ones.

    The snapshot suffix is applied to all modules when enabled and
    supported; a module that only changes because of it joins the result
    with reason snapshot-suffix.
    """
    snapshots = options.append_snapshot and options.supports_snapshots
    processed: list[ProcessedModuleChange] = []

    for change in changes:
        if change.needs_processing:
            change.to_version = next_version(
                change, options, prerelease_id, build_metadata
            )
        else:
            change.to_version = change.from_version

        if snapshots:
            suffixed = apply_snapshot_suffix(change.to_version)
            if not change.needs_processing and suffixed != change.to_version:
                change.needs_processing = True
                change.reason = ChangeReason.SNAPSHOT_SUFFIX
            change.to_version = suffixed

        if change.needs_processing and change.reason is not None:
            processed.append(
                ProcessedModuleChange(
                    module=change.module,
                    from_version=change.from_version,
                    to_version=change.to_version,
                    bump=change.bump,
                    reason=change.reason,
                )
            )

    return processed


def validate_modules(modules: Sequence[Module]) -> None:
    """Check the module graph and every module's current version.

    Raises:
        RuntimeError: If the module graph is structurally invalid.
        ValueError: If any module's version is not valid semver.
    """
    validate_graph(modules)
    for module in modules:
        parse_version(module.version, module.id)


def calculate_version_bumps(
    modules: Sequence[Module],
    module_commits: Mapping[str, Sequence[Commit]],
    rules: VersionRules,
    options: BumpOptions,
    build_metadata: str | None = None,
    now: datetime | None = None,
) -> list[ProcessedModuleChange]:
    """Calculate the next version of every module from fetched commits.

    Args:
        modules: Module graph from an adapter, in output order.
        module_commits: Map of module id → commits attributed to it.
        rules: Validated version rules.
        options: Run mode flags.
        build_metadata: Short commit id, used when add_build_metadata is set.
        now: Clock override for timestamped prerelease ids.

    Returns:
        Frozen changes for the modules whose version changes, in module order.

    Raises:
        RuntimeError: If the module graph is structurally invalid.
        ValueError: If any module has an invalid version.
    """
    validate_modules(modules)
    return _calculate(modules, module_commits, rules, options, build_metadata, now)


def _calculate(
    modules: Sequence[Module],
    module_commits: Mapping[str, Sequence[Commit]],
    rules: VersionRules,
    options: BumpOptions,
    build_metadata: str | None,
    now: datetime | None,
) -> list[ProcessedModuleChange]:
    prerelease_id = options.prerelease_id
    if options.timestamp_versions and options.prerelease_mode:
        prerelease_id = timestamp_prerelease_id(prerelease_id, now)
        print(f"  Timestamped prerelease id: {prerelease_id}")

    step("Calculating version bumps")
    changes, index = initial_changes(modules, module_commits, rules, options)
    for change in changes:
        if change.bump != BumpSeverity.NONE:
            print(f"  {change.module.id}: {change.bump} (commits)")

    step("Cascading through affected modules")
    propagate_cascade(changes, index, rules)

    processed = format_changes(changes, options, prerelease_id, build_metadata)
    print(f"\n  {len(processed)} modules need a version update")
    return processed


def run_plan(
    modules: Sequence[Module],
    rules: VersionRules,
    options: BumpOptions,
    repo_root: Path | str | None = None,
) -> list[ProcessedModuleChange]:
    """Fetch commits from git and calculate version bumps for a repository.

    Modules are validated before any git call is made.

    Args:
        modules: Module graph from an adapter.
        rules: Validated version rules.
        options: Run mode flags.
        repo_root: Repository to read history from; defaults to cwd.

    Raises:
        subprocess.CalledProcessError: If build metadata is requested and
            HEAD cannot be resolved (e.g. a repository without commits).
    """
    validate_modules(modules)

    def source(module: Module, excludes: list[str]) -> list[Commit]:
        return get_commits_since_last_tag(module, excludes, cwd=repo_root)

    module_commits = fetch_module_commits(modules, source)

    build_metadata = None
    if options.add_build_metadata:
        build_metadata = get_current_short_sha(cwd=repo_root)
        print(f"  Build metadata: {build_metadata}")

    return _calculate(modules, module_commits, rules, options, build_metadata, None)
