"""TOML reading utilities.

Uses tomlkit to read modbump configuration (modbump.toml or
[tool.modbump] in pyproject.toml) and the module manifest produced by a
build-system adapter.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit

from .config import VersionRules, build_rules
from .models import Module

CONFIG_FILENAME = "modbump.toml"


def load_toml(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file into plain Python containers."""
    return tomlkit.parse(path.read_text()).unwrap()


def find_config(root: Path, config_path: Path | None = None) -> dict[str, Any] | None:
    """Locate the raw modbump configuration for a repository.

    Search order:
    1. config_path, if given and it exists (relative to root)
    2. modbump.toml in root
    3. [tool.modbump] in root/pyproject.toml

    Returns:
        The raw configuration table, or None if nothing was found.
    """
    if config_path is not None:
        explicit = root / config_path
        if explicit.exists():
            return load_toml(explicit)
        print(f"  Config file {config_path} not found, searching defaults")

    standalone = root / CONFIG_FILENAME
    if standalone.exists():
        return load_toml(standalone)

    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        return load_toml(pyproject).get("tool", {}).get("modbump")

    return None


def load_config(root: Path, config_path: Path | None = None) -> VersionRules:
    """Load and validate version rules, falling back to the defaults.

    Raises:
        pydantic.ValidationError: If the configuration is invalid.
    """
    return build_rules(find_config(root, config_path))


def load_manifest(path: Path) -> tuple[list[Module], bool]:
    """Read a module manifest.

    The manifest lists already-discovered modules as [[module]] tables:

        supports-snapshots = true

        [[module]]
        id = ":core"
        path = "core"
        version = "1.2.0"
        affects = [":"]

    name defaults to the last ":"/"/" segment of the id, and type to
    "root" when path is ".".

    Returns:
        Tuple of (modules in file order, adapter snapshot support flag).

    Raises:
        pydantic.ValidationError: If a module entry is malformed.
    """
    doc = load_toml(path)
    modules: list[Module] = []
    for entry in doc.get("module", []):
        data = dict(entry)
        path_value = data.get("path", ".")
        data.setdefault("type", "root" if path_value == "." else "module")
        data.setdefault("name", _default_name(str(data.get("id", ""))))
        modules.append(Module.model_validate(data))
    return modules, bool(doc.get("supports-snapshots", False))


def _default_name(module_id: str) -> str:
    """Derive a module name from its id (":core:api" → "api")."""
    segments = [s for s in module_id.replace("/", ":").split(":") if s]
    return segments[-1] if segments else "root"
