"""Builders shared across the test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from chainguardian.core.inventory.models import Package, Vulnerability
from chainguardian.core.registries import (
    MaliciousHashRegistry,
    RiskSnapshot,
    TrustRegistry,
    VulnerabilityIndex,
)

FIXED_TIME = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
NPM = "https://registry.npmjs.org"


def fixed_clock() -> datetime:
    return FIXED_TIME


class TickingClock:
    """Clock that advances one second per call, for ordering tests."""

    def __init__(self, start: datetime = FIXED_TIME) -> None:
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now = current + timedelta(seconds=1)
        return current


def make_package(**kwargs: Any) -> Package:
    """Create a trusted, unsigned npm Package with sensible defaults."""
    defaults: dict[str, Any] = dict(
        name="left-pad",
        version="1.3.0",
        source=f"{NPM}/left-pad",
        hash="sha256:aaaa",
        signatures=(),
        ecosystem="npm",
    )
    defaults.update(kwargs)
    return Package(**defaults)


def make_vulnerability(**kwargs: Any) -> Vulnerability:
    defaults: dict[str, Any] = dict(
        id="CVE-2026-0001",
        cvss=5.0,
        description="Prototype pollution",
        fixed_in="",
        discovered_at=None,
    )
    defaults.update(kwargs)
    return Vulnerability(**defaults)


def make_snapshot(
    *,
    trusted: Iterable[str] = (NPM,),
    vulnerabilities: dict[str, list[Vulnerability]] | None = None,
    malicious: dict[str, str] | None = None,
) -> RiskSnapshot:
    """Snapshot trusting only the npm registry unless told otherwise."""
    return RiskSnapshot(
        trust=TrustRegistry(trusted),
        vulnerabilities=VulnerabilityIndex(vulnerabilities or {}),
        malicious=MaliciousHashRegistry(malicious or {}),
    )
