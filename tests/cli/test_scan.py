"""Tests for ``chainguardian scan``.

Verifies:
    - Exit codes for empty, clean, and risky projects.
    - JSON output format.
    - Severity threshold handling.
    - Registry data and configuration options.
    - Failure exit code when no signing key is configured.
"""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from chainguardian.cli.main import cli


class TestScanEmptyDirectory:
    def test_exit_code_2(self, runner: CliRunner, empty_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(empty_project)])
        assert result.exit_code == 2
        assert "No dependencies found" in result.output

    def test_json_format(self, runner: CliRunner, empty_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(empty_project), "--format", "json"])
        assert result.exit_code == 2
        data = json.loads(result.output)
        assert data["summary"]["dependencies"] == 0
        assert data["summary"]["signature_chain"] == 1


class TestScanFindings:
    def test_untrusted_source_fails_default_threshold(
        self, runner: CliRunner, npm_project: Path
    ) -> None:
        result = runner.invoke(cli, ["scan", str(npm_project), "--format", "json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["summary"]["project"] == "web-frontend"
        (alert,) = data["alerts"]
        assert alert["kind"] == "untrusted_source"
        assert alert["package"]["name"] == "evil-pkg"

    def test_threshold_above_findings_passes(
        self, runner: CliRunner, npm_project: Path
    ) -> None:
        result = runner.invoke(
            cli, ["scan", str(npm_project), "--severity-threshold", "critical"]
        )
        assert result.exit_code == 0

    def test_text_output(self, runner: CliRunner, npm_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(npm_project)])
        assert result.exit_code == 1
        assert "HIGH" in result.output
        assert "dependencies scanned" in result.output

    def test_clean_python_project(self, runner: CliRunner, python_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(python_project)])
        assert result.exit_code == 0
        assert "No alerts" in result.output

    def test_registry_data_file(
        self, runner: CliRunner, npm_project: Path, risk_data: Path
    ) -> None:
        result = runner.invoke(
            cli,
            ["scan", str(npm_project), "--data", str(risk_data), "--format", "json"],
        )
        assert result.exit_code == 1
        kinds = [a["kind"] for a in json.loads(result.output)["alerts"]]
        assert kinds[0] == "malicious_package"
        assert sorted(kinds) == ["malicious_package", "untrusted_source", "vulnerability"]

    def test_live_alerts(self, runner: CliRunner, npm_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(npm_project), "--live"])
        assert result.exit_code == 1
        assert "[HIGH]" in result.output

    def test_first_match_only_flag(self, runner: CliRunner, npm_project: Path) -> None:
        (npm_project / "requirements.txt").write_text("six==1.16.0\n")
        result = runner.invoke(
            cli,
            ["scan", str(npm_project), "--first-match-only", "--format", "json"],
        )
        assert json.loads(result.output)["summary"]["ecosystems"] == ["npm"]


class TestScanConfiguration:
    def test_config_file_discovered(self, runner: CliRunner, npm_project: Path) -> None:
        (npm_project / "chainguardian.yaml").write_text(
            "trusted_sources:\n  - https://evil.example/\n"
        )
        result = runner.invoke(cli, ["scan", str(npm_project), "--format", "json"])
        untrusted = [a["package"]["name"] for a in json.loads(result.output)["alerts"]]
        assert untrusted == ["left-pad"]

    def test_invalid_config_exits_3(self, runner: CliRunner, npm_project: Path) -> None:
        (npm_project / "chainguardian.yaml").write_text("max_workers: 0\n")
        result = runner.invoke(cli, ["scan", str(npm_project)])
        assert result.exit_code == 3
        assert "max_workers" in result.output

    def test_missing_signing_key_exits_3(self, npm_project: Path) -> None:
        runner = CliRunner(env={"CHAINGUARDIAN_SIGNING_KEY": None})
        result = runner.invoke(cli, ["scan", str(npm_project)])
        assert result.exit_code == 3
        assert "CHAINGUARDIAN_SIGNING_KEY" in result.output

    def test_nonexistent_path(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["scan", str(tmp_path / "nope")])
        assert result.exit_code == 2
