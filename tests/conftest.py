"""Shared fixtures for chainguardian tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from chainguardian.core.sbom import HmacSigner, SBOMSigner
from tests.helpers import fixed_clock

SIGNING_KEY = b"test-signing-key"


@pytest.fixture
def hmac_signer() -> HmacSigner:
    return HmacSigner(SIGNING_KEY, key_id="test")


@pytest.fixture
def sbom_signer(hmac_signer: HmacSigner) -> SBOMSigner:
    return SBOMSigner(hmac_signer, clock=fixed_clock)


@pytest.fixture
def npm_project(tmp_path: Path) -> Path:
    """npm project with a v3 lockfile: one clean and one untrusted package."""
    project = tmp_path / "web"
    project.mkdir()
    (project / "package.json").write_text(json.dumps({
        "name": "web-frontend",
        "version": "2.1.0",
        "dependencies": {"left-pad": "^1.3.0", "evil-pkg": "^0.0.1"},
    }))
    (project / "package-lock.json").write_text(json.dumps({
        "name": "web-frontend",
        "version": "2.1.0",
        "lockfileVersion": 3,
        "packages": {
            "": {"name": "web-frontend", "version": "2.1.0"},
            "node_modules/left-pad": {
                "version": "1.3.0",
                "resolved": "https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz",
                "integrity": "sha512-AAAA",
            },
            "node_modules/evil-pkg": {
                "version": "0.0.1",
                "resolved": "https://evil.example/evil-pkg-0.0.1.tgz",
                "integrity": "sha512-BBBB",
            },
        },
    }))
    return project


@pytest.fixture
def python_project(tmp_path: Path) -> Path:
    """Python project with pinned requirements from PyPI."""
    project = tmp_path / "svc"
    project.mkdir()
    (project / "requirements.txt").write_text(
        "# runtime\n"
        "requests==2.31.0\n"
        "urllib3==1.26.5 --hash=sha256:" + "ab" * 32 + "\n"
        "flask>=2.0\n"
    )
    return project


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    project = tmp_path / "empty"
    project.mkdir()
    return project
