"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from modbump.config import VersionRules
from modbump.models import Commit, Module


def make_module(
    id: str,
    path: str,
    version: str = "1.0.0",
    affects: list[str] | None = None,
) -> Module:
    """Build a Module with sensible defaults for tests."""
    return Module(
        id=id,
        name=id.split(":")[-1] or "root",
        path=path,
        type="root" if path == "." else "module",
        affected_modules=frozenset(affects or []),
        version=version,
    )


def make_commit(type: str, breaking: bool = False, hash: str = "abc123") -> Commit:
    return Commit(hash=hash, type=type, subject=f"{type} change", breaking=breaking)


@pytest.fixture
def rules() -> VersionRules:
    """Default rules: feat → minor, fix → patch, chores ignored."""
    return VersionRules()


@pytest.fixture
def flat_rules() -> VersionRules:
    """Rules whose dependency transfer always yields a patch bump."""
    return VersionRules.model_validate(
        {"dependency-bumps": {"major": "patch", "minor": "patch", "patch": "patch"}}
    )


@pytest.fixture
def hierarchy() -> list[Module]:
    """Root with core and core/api; core affects the root."""
    return [
        make_module(":", "."),
        make_module(":core", "core", affects=[":"]),
        make_module(":core:api", "core/api"),
    ]


@pytest.fixture
def tmp_manifest(tmp_path: Path) -> Path:
    """Create a temporary module manifest."""
    content = """\
supports-snapshots = true

[[module]]
id = ":"
path = "."
version = "1.0.0"

[[module]]
id = ":core"
path = "core"
version = "2.1.0"
affects = [":"]

[[module]]
id = ":core:api"
path = "core/api"
version = "0.3.0"
declared-version = false
"""
    manifest = tmp_path / "modules.toml"
    manifest.write_text(content)
    return manifest
