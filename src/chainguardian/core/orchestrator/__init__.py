"""Scan orchestration: scanners -> concurrent evaluation -> signed SBOM."""

from chainguardian.core.orchestrator.engine import ScanOrchestrator
from chainguardian.core.orchestrator.models import ScanOptions, ScanReport

__all__ = [
    "ScanOptions",
    "ScanOrchestrator",
    "ScanReport",
]
