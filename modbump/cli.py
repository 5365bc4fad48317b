"""CLI entry point for modbump."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import click
from pydantic import ValidationError

from modbump.bumper import run_plan
from modbump.models import BumpOptions, ProcessedModuleChange
from modbump.toml import load_config, load_manifest


def _changes_json(changes: list[ProcessedModuleChange]) -> str:
    return json.dumps(
        [
            {
                "module": c.module.id,
                "path": c.module.path,
                "from": c.from_version,
                "to": c.to_version,
                "bump": str(c.bump),
                "reason": str(c.reason),
            }
            for c in changes
        ]
    )


def _write_output(output_path: str, name: str, value: str) -> None:
    with open(output_path, "a") as fh:
        fh.write(f"{name}={value}\n")


@click.group()
@click.version_option(package_name="modbump")
def cli() -> None:
    """Cascading semantic versions for multi-module repositories."""


@cli.command()
@click.option(
    "--modules",
    "manifest",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Module manifest (TOML) describing the module graph.",
)
@click.option(
    "--repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository root to read history and configuration from.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file relative to the repo root.",
)
@click.option("--prerelease", is_flag=True, help="Produce prerelease versions.")
@click.option(
    "--prerelease-id",
    default="alpha",
    show_default=True,
    help="Identifier for prerelease versions.",
)
@click.option(
    "--bump-unchanged",
    is_flag=True,
    help="In prerelease mode, also bump modules without changes.",
)
@click.option(
    "--timestamp-versions",
    is_flag=True,
    help="Stamp the prerelease id with the current UTC date and time.",
)
@click.option(
    "--build-metadata", is_flag=True, help="Append the short commit hash."
)
@click.option("--snapshot", is_flag=True, help="Append the -SNAPSHOT suffix.")
@click.option(
    "--github-output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Append a changes=<json> line to this GitHub step output file.",
)
def plan(
    manifest: Path,
    repo: Path,
    config_path: Path | None,
    prerelease: bool,
    prerelease_id: str,
    bump_unchanged: bool,
    timestamp_versions: bool,
    build_metadata: bool,
    snapshot: bool,
    github_output: str | None,
) -> None:
    """Calculate the next version of every module."""
    try:
        rules = load_config(repo, config_path)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration:\n{exc}") from exc
    try:
        modules, supports_snapshots = load_manifest(manifest)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid module manifest:\n{exc}") from exc

    options = BumpOptions(
        prerelease_mode=prerelease,
        prerelease_id=prerelease_id,
        bump_unchanged=bump_unchanged,
        add_build_metadata=build_metadata,
        append_snapshot=snapshot,
        supports_snapshots=supports_snapshots,
        timestamp_versions=timestamp_versions,
    )

    try:
        changes = run_plan(modules, rules, options, repo_root=repo)
    except (RuntimeError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        raise click.ClickException(f"git failed: {detail}") from exc

    if github_output:
        _write_output(github_output, "changes", _changes_json(changes))

    click.echo()
    if not changes:
        click.echo("No modules need a version update.")
        return
    for c in changes:
        click.echo(
            f"{c.module.id}: {c.from_version} → {c.to_version} ({c.bump}, {c.reason})"
        )
