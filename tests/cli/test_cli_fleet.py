"""Tests for the ``edgefleet plan``, ``propagate`` and ``report`` CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

from click.testing import CliRunner

from edgefleet.cli import main

if TYPE_CHECKING:
    from pathlib import Path

_FLEET_YAML = """\
version: "1"
namespace: default
applications:
  - name: web
    version: "3"
    selector: env=dev
  - name: core
    version: "7"
    selector: env
    system: true
nodes:
  - name: gw-1
    labels:
      env: dev
  - name: gw-2
    labels:
      env: prod
"""


def _manifest(tmp_path: Path, content: str = _FLEET_YAML) -> Path:
    f = tmp_path / "fleet.yaml"
    f.write_text(content)
    return f


def _nodes_by_name(output: str) -> dict[str, dict]:
    start = output.index("[")
    return {n["name"]: n for n in json.loads(output[start:])}


class TestPlanCommand:
    def test_table(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["plan", str(_manifest(tmp_path))])

        assert result.exit_code == 0
        assert "Node Desires" in result.output
        assert "gw-1" in result.output

    def test_json(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["plan", str(_manifest(tmp_path)), "--json"])

        assert result.exit_code == 0
        nodes = _nodes_by_name(result.output)
        assert nodes["gw-1"]["desire"]["apps"] == [{"name": "web", "version": "3"}]
        assert nodes["gw-2"]["desire"]["apps"] == []
        assert nodes["gw-2"]["desire"]["sysapps"] == [{"name": "core", "version": "7"}]

    def test_invalid_manifest(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["plan", str(_manifest(tmp_path, "nodes: 3\n"))])

        assert result.exit_code != 0
        assert "Validation error" in result.output

    def test_bad_selector(self, tmp_path: Path) -> None:
        content = _FLEET_YAML.replace("selector: env=dev", "selector: env ~ dev")
        runner = CliRunner()
        result = runner.invoke(main, ["plan", str(_manifest(tmp_path, content))])

        assert result.exit_code == 1
        assert "Planning error" in result.output

    def test_missing_file(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["plan", "/nonexistent/fleet.yaml"])

        assert result.exit_code != 0


class TestPropagateCommand:
    def test_version_bump(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["propagate", str(_manifest(tmp_path)), "--app", "web", "--version", "4", "--json"]
        )

        assert result.exit_code == 0
        assert "Patched web on 1 node(s)" in result.output
        nodes = _nodes_by_name(result.output)
        assert nodes["gw-1"]["desire"]["apps"] == [{"name": "web", "version": "4"}]

    def test_remove(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["propagate", str(_manifest(tmp_path)), "--app", "core", "--remove", "--json"]
        )

        assert result.exit_code == 0
        assert "Removed core on 2 node(s)" in result.output
        nodes = _nodes_by_name(result.output)
        assert nodes["gw-1"]["desire"]["sysapps"] == []

    def test_unknown_app(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["propagate", str(_manifest(tmp_path)), "--app", "nope", "--version", "1"]
        )

        assert result.exit_code == 1
        assert "Unknown application" in result.output

    def test_requires_exactly_one_action(self, tmp_path: Path) -> None:
        runner = CliRunner()
        manifest = str(_manifest(tmp_path))

        neither = runner.invoke(main, ["propagate", manifest, "--app", "web"])
        both = runner.invoke(main, ["propagate", manifest, "--app", "web", "--version", "1", "--remove"])

        assert neither.exit_code == 2
        assert both.exit_code == 2

    def test_selectorless_app_touches_nothing(self, tmp_path: Path) -> None:
        content = _FLEET_YAML + "  - name: gw-3\n    labels: {}\n"
        content = content.replace("applications:\n", "applications:\n  - name: manual\n    version: '1'\n")
        runner = CliRunner()
        result = runner.invoke(
            main, ["propagate", str(_manifest(tmp_path, content)), "--app", "manual", "--version", "2"]
        )

        assert result.exit_code == 0
        assert "No nodes desire manual" in result.output


class TestReportCommand:
    def test_merges_report(self, tmp_path: Path) -> None:
        report = tmp_path / "report.yaml"
        report.write_text("apps:\n  - name: web\n    version: '3'\ncustom: 1\n")

        runner = CliRunner()
        result = runner.invoke(
            main, ["report", str(_manifest(tmp_path)), "gw-1", str(report), "--json"]
        )

        assert result.exit_code == 0
        merged = json.loads(result.output)
        assert merged["apps"] == [{"name": "web", "version": "3"}]
        assert merged["custom"] == 1

    def test_table(self, tmp_path: Path) -> None:
        report = tmp_path / "report.yaml"
        report.write_text("apps:\n  - name: web\n    version: '3'\n")

        runner = CliRunner()
        result = runner.invoke(main, ["report", str(_manifest(tmp_path)), "gw-1", str(report)])

        assert result.exit_code == 0
        assert "Node Report" in result.output
        assert "web@3" in result.output

    def test_unknown_node(self, tmp_path: Path) -> None:
        report = tmp_path / "report.yaml"
        report.write_text("custom: 1\n")

        runner = CliRunner()
        result = runner.invoke(main, ["report", str(_manifest(tmp_path)), "ghost", str(report)])

        assert result.exit_code == 1
        assert "Node not found" in result.output


class TestGlobalFlags:
    def test_version(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_telemetry_flag(self, tmp_path: Path) -> None:
        with patch("edgefleet.cli_commands._common.configure_telemetry") as mock_configure:
            runner = CliRunner()
            result = runner.invoke(main, ["--telemetry", "plan", str(_manifest(tmp_path))])

        assert result.exit_code == 0
        mock_configure.assert_called_once_with(otlp_endpoint=None)

    def test_verbose_flag(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--verbose", "plan", str(_manifest(tmp_path))])

        assert result.exit_code == 0
