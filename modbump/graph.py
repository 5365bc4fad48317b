"""Module graph utilities.

Validates the module graph handed over by an adapter and propagates bump
severities along its "affects" edges. If module A lists B in its affected
modules, a bump of A transfers to B according to the dependency rules.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

from .config import VersionRules, dependency_transfer
from .models import BumpSeverity, ChangeReason, Module, ModuleChange


def validate_graph(modules: Sequence[Module]) -> None:
    """Check structural invariants of a module graph.

    Every problem is collected first and reported in a single error, so a
    broken adapter can be fixed in one pass.

    Raises:
        RuntimeError: If ids are duplicated, there is not exactly one root
                      module, or an affects edge points at an unknown id.
    """
    problems: list[str] = []

    ids = [m.id for m in modules]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        problems.append(f"duplicate module ids: {', '.join(duplicates)}")

    roots = [m.id for m in modules if m.type == "root"]
    if len(roots) != 1:
        found = ", ".join(roots) if roots else "none"
        problems.append(f"expected exactly one root module, found: {found}")

    known = set(ids)
    for module in modules:
        for target in sorted(module.affected_modules):
            if target not in known:
                problems.append(f"{module.id} → {target} (unknown module)")

    if problems:
        raise RuntimeError(
            "Invalid module graph:\n" + "\n".join(f"  - {p}" for p in problems)
        )


def propagate_cascade(
    changes: Sequence[ModuleChange],
    index: dict[str, int],
    rules: VersionRules,
) -> list[str]:
    """Spread bump severities through the graph until nothing changes.

    changes is an arena of per-module records and index maps module id to
    its position; the worklist holds arena positions. Each pop expands a
    module's outgoing edges, merging the transferred severity into each
    target with max(). A target is re-queued only when the merge raises its
    severity or newly includes it, and a module is expanded again only if
    its severity rose since its last expansion. Severities only go up and
    there are four of them, so the walk terminates even on cycles.

    Args:
        changes: ModuleChange records, mutated in place.
        index: Map of module id → position in changes.
        rules: Version rules holding the dependency transfer table.

    Returns:
        Ids of expanded modules, in expansion order.

    Example:
        If C affects B and B affects A, with C at MAJOR and transfer
        MAJOR → PATCH, PATCH → PATCH: B and A both end at PATCH with
        reason dependency-cascade.
    """
    # Start from every module that already carries a bump
    queue = deque(
        i
        for i, change in enumerate(changes)
        if change.needs_processing and change.bump != BumpSeverity.NONE
    )
    # Severity each module had when its edges were last walked
    expanded: dict[int, BumpSeverity] = {}
    order: list[str] = []

    while queue:
        current = queue.popleft()
        source = changes[current]
        if current in expanded and expanded[current] >= source.bump:
            continue

        expanded[current] = source.bump
        order.append(source.module.id)
        transferred = dependency_transfer(source.bump, rules)
        if transferred == BumpSeverity.NONE:
            continue

        for target_id in sorted(source.module.affected_modules):
            target_pos = index[target_id]
            target = changes[target_pos]
            merged = max(target.bump, transferred)
            if merged == target.bump and target.needs_processing:
                continue

            print(
                f"  {target_id}: {target.bump} → {merged} "
                f"(affected by {source.module.id})"
            )
            target.bump = merged
            target.reason = ChangeReason.DEPENDENCY_CASCADE
            target.needs_processing = True
            queue.append(target_pos)

    return order
