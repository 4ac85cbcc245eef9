"""Fixtures and fakes for orchestrator tests."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from chainguardian.core.inventory import Package, Vulnerability
from chainguardian.scanners import DependencyScanner, ScannerRegistry


class StaticScanner(DependencyScanner):
    """Scanner that always matches and returns a fixed package list."""

    def __init__(self, packages: list[Package], ecosystem: str = "fake") -> None:
        self._packages = packages
        self._ecosystem = ecosystem

    @property
    def ecosystem(self) -> str:
        return self._ecosystem

    @property
    def markers(self) -> tuple[str, ...]:
        return ()

    def detect(self, path: Path) -> bool:
        return True

    def scan(self, path: Path) -> list[Package]:
        return list(self._packages)


class FailingScanner(StaticScanner):
    def __init__(self, exc: Exception, ecosystem: str = "broken") -> None:
        super().__init__([], ecosystem)
        self._exc = exc

    def scan(self, path: Path) -> list[Package]:
        raise self._exc


def registry_of(*scanners: DependencyScanner) -> ScannerRegistry:
    registry = ScannerRegistry()
    for scanner in scanners:
        registry.register(scanner)
    return registry


class SlowFeed:
    """Feed that sleeps for packages whose name starts with ``slow``."""

    def __init__(self, delay: float) -> None:
        self.delay = delay

    def lookup(self, name: str, version: str, ecosystem: str = "") -> list[Vulnerability]:
        if name.startswith("slow"):
            time.sleep(self.delay)
        return []


class CallbackFeed:
    def __init__(self, callback: Callable[[str], None]) -> None:
        self.callback = callback

    def lookup(self, name: str, version: str, ecosystem: str = "") -> list[Vulnerability]:
        self.callback(name)
        return []


class SlowScanner(StaticScanner):
    """Scanner that takes ``delay`` seconds to read its manifests."""

    def __init__(self, packages: list[Package], delay: float) -> None:
        super().__init__(packages, "slow")
        self.delay = delay

    def scan(self, path: Path) -> list[Package]:
        time.sleep(self.delay)
        return super().scan(path)


class SlowVerifier:
    """Verifier that hangs for ``delay`` seconds, then accepts."""

    def __init__(self, delay: float) -> None:
        self.delay = delay

    def verify(self, pkg: Package) -> bool:
        time.sleep(self.delay)
        return True
