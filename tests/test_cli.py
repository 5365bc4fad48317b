"""Tests for modbump.cli."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner
from conftest import make_module

from modbump.cli import cli
from modbump.models import BumpSeverity, ChangeReason, ProcessedModuleChange


def _change(module_id: str, path: str, to_version: str) -> ProcessedModuleChange:
    return ProcessedModuleChange(
        module=make_module(module_id, path),
        from_version="1.0.0",
        to_version=to_version,
        bump=BumpSeverity.PATCH,
        reason=ChangeReason.DEPENDENCY_CASCADE,
    )


class TestPlan:
    """Tests for the plan command."""

    @patch("modbump.cli.run_plan")
    def test_prints_changes(
        self, mock_run: MagicMock, tmp_path: Path, tmp_manifest: Path
    ) -> None:
        mock_run.return_value = [_change(":", ".", "1.0.1")]

        result = CliRunner().invoke(
            cli, ["plan", "--modules", str(tmp_manifest), "--repo", str(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        assert ":: 1.0.0 → 1.0.1 (patch, dependency-cascade)" in result.output

    @patch("modbump.cli.run_plan")
    def test_passes_mode_flags(
        self, mock_run: MagicMock, tmp_path: Path, tmp_manifest: Path
    ) -> None:
        mock_run.return_value = []

        result = CliRunner().invoke(
            cli,
            [
                "plan",
                "--modules",
                str(tmp_manifest),
                "--repo",
                str(tmp_path),
                "--prerelease",
                "--prerelease-id",
                "rc",
                "--bump-unchanged",
                "--build-metadata",
                "--snapshot",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "No modules need a version update." in result.output
        modules, rules, options = mock_run.call_args.args
        assert [m.id for m in modules] == [":", ":core", ":core:api"]
        assert rules.default_bump == "patch"
        assert options.prerelease_mode
        assert options.prerelease_id == "rc"
        assert options.bump_unchanged
        assert options.add_build_metadata
        assert options.append_snapshot
        # From the manifest
        assert options.supports_snapshots
        assert not options.timestamp_versions

    @patch("modbump.cli.run_plan")
    def test_writes_github_output(
        self, mock_run: MagicMock, tmp_path: Path, tmp_manifest: Path
    ) -> None:
        mock_run.return_value = [_change(":core", "core", "1.0.1")]
        output = tmp_path / "github_output"

        result = CliRunner().invoke(
            cli,
            [
                "plan",
                "--modules",
                str(tmp_manifest),
                "--repo",
                str(tmp_path),
                "--github-output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        name, value = output.read_text().strip().split("=", 1)
        assert name == "changes"
        assert json.loads(value) == [
            {
                "module": ":core",
                "path": "core",
                "from": "1.0.0",
                "to": "1.0.1",
                "bump": "patch",
                "reason": "dependency-cascade",
            }
        ]

    def test_invalid_config(self, tmp_path: Path, tmp_manifest: Path) -> None:
        (tmp_path / "modbump.toml").write_text('default-bump = "mega"\n')

        result = CliRunner().invoke(
            cli, ["plan", "--modules", str(tmp_manifest), "--repo", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    @patch("modbump.cli.run_plan")
    def test_graph_error_is_reported(
        self, mock_run: MagicMock, tmp_path: Path, tmp_manifest: Path
    ) -> None:
        mock_run.side_effect = RuntimeError("Invalid module graph:\n  - :a → :b")

        result = CliRunner().invoke(
            cli, ["plan", "--modules", str(tmp_manifest), "--repo", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert ":a → :b" in result.output

    def test_requires_manifest(self) -> None:
        result = CliRunner().invoke(cli, ["plan"])
        assert result.exit_code == 2

    def test_invalid_manifest(self, tmp_path: Path) -> None:
        manifest = tmp_path / "modules.toml"
        manifest.write_text('[[module]]\nid = ":"\npath = "."\n')

        result = CliRunner().invoke(
            cli, ["plan", "--modules", str(manifest), "--repo", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert "Invalid module manifest" in result.output
        assert "Invalid configuration" not in result.output

    @patch("modbump.cli.run_plan")
    def test_git_failure_is_reported(
        self, mock_run: MagicMock, tmp_path: Path, tmp_manifest: Path
    ) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(
            128,
            ["git", "rev-parse", "--short", "HEAD"],
            stderr="fatal: ambiguous argument 'HEAD'\n",
        )

        result = CliRunner().invoke(
            cli,
            [
                "plan",
                "--modules",
                str(tmp_manifest),
                "--repo",
                str(tmp_path),
                "--build-metadata",
            ],
        )

        assert result.exit_code == 1
        assert "git failed: fatal: ambiguous argument 'HEAD'" in result.output
        assert "Traceback" not in result.output
