"""Scanner registry for auto-detecting project ecosystems.

The ``ScannerRegistry`` keeps an ordered list of ``DependencyScanner``
instances. Registration order is priority order: ``applicable(path)``
returns every scanner whose ``detect()`` matches, highest priority first,
and the orchestrator scans them in that order so the SBOM's dependency
order is stable across runs.

A project may match several ecosystems (a Python service with a
``package.json`` for its front-end). All matches are scanned and merged by
default; ``first_match_only`` restricts the result to the
highest-priority match.
"""

from __future__ import annotations

from pathlib import Path

from chainguardian.scanners.base import DependencyScanner
from chainguardian.scanners.maven import MavenScanner
from chainguardian.scanners.npm import NpmScanner
from chainguardian.scanners.python import PythonScanner


class ScannerRegistry:
    """Priority-ordered registry of dependency scanners.

    Attributes:
        scanners: Registered scanner instances, highest priority first.
    """

    def __init__(self) -> None:
        self.scanners: list[DependencyScanner] = []

    def register(self, scanner: DependencyScanner) -> None:
        """Add a scanner at the lowest priority."""
        self.scanners.append(scanner)

    def applicable(self, path: Path, *, first_match_only: bool = False) -> list[DependencyScanner]:
        """Scanners whose markers are present under ``path``, in priority order."""
        matched: list[DependencyScanner] = []
        for scanner in self.scanners:
            if scanner.detect(path):
                matched.append(scanner)
                if first_match_only:
                    break
        return matched

    @property
    def ecosystems(self) -> list[str]:
        return [s.ecosystem for s in self.scanners]


def default_registry() -> ScannerRegistry:
    """Create a ScannerRegistry pre-loaded with the built-in scanners.

    Priority order:
    1. ``NpmScanner`` -- package-lock.json / package.json
    2. ``PythonScanner`` -- requirements.txt
    3. ``MavenScanner`` -- pom.xml
    """
    registry = ScannerRegistry()
    registry.register(NpmScanner())
    registry.register(PythonScanner())
    registry.register(MavenScanner())
    return registry
