"""Shared fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

SIGNING_ENV = {"CHAINGUARDIAN_SIGNING_KEY": "cli-test-key", "CHAINGUARDIAN_VERIFY_KEY": None}


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner with a signing key in the environment."""
    return CliRunner(env=SIGNING_ENV)


@pytest.fixture
def risk_data(tmp_path: Path) -> Path:
    """Registry data flagging left-pad's lockfile integrity as malicious."""
    path = tmp_path / "risk-data.yaml"
    path.write_text(
        "malicious_hashes:\n"
        "  sha512-AAAA: Compromised maintainer account\n"
        "vulnerabilities:\n"
        "  - name: left-pad\n"
        "    version: 1.3.0\n"
        "    id: CVE-2026-1111\n"
        "    cvss: 5.5\n"
        "    fixed_in: 1.3.1\n"
    )
    return path
