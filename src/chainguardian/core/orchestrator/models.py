"""Orchestrator data models: ScanOptions and ScanReport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chainguardian.core.alerts.models import Alert, Severity, sort_for_display
from chainguardian.core.sbom.models import SBOM


@dataclass(frozen=True)
class ScanOptions:
    """Concurrency, timeout, and ecosystem-selection knobs for one scan.

    Attributes:
        max_workers: Packages evaluated in parallel.
        package_timeout: Seconds one package's evaluation may take, or
            ``None`` for no bound. Expiry yields an incomplete-evaluation alert.
        scan_deadline: Seconds the whole scan may take, counted from the
            start of the scan, or ``None``. Dependency collection is not
            interrupted but its time counts. On expiry finished packages are
            kept and in-flight or unstarted ones are reported incomplete.
        first_match_only: Scan only the highest-priority matching ecosystem
            instead of every match.
        publish_timeout: Bound on publishing to the alert stream once a scan
            has been cancelled. Never applies to a running scan.
    """

    max_workers: int = 8
    package_timeout: float | None = 30.0
    scan_deadline: float | None = None
    first_match_only: bool = False
    publish_timeout: float = 1.0

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        for name in ("package_timeout", "scan_deadline"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive or None, got {value}")
        if self.publish_timeout <= 0:
            raise ValueError(f"publish_timeout must be positive, got {self.publish_timeout}")


@dataclass
class ScanReport:
    """Everything one scan produced.

    Attributes:
        sbom: The sealed SBOM.
        alerts: Merged alerts. Per-package order is canonical; order between
            packages is unspecified.
        warnings: Structural warnings (failed ecosystems, abandoned work).
        ecosystems: Ecosystems that were scanned, in priority order.
        incomplete: Labels of packages whose evaluation did not finish.
        snapshot_generation: Generation of the risk snapshot used.
    """

    sbom: SBOM
    alerts: list[Alert] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    ecosystems: list[str] = field(default_factory=list)
    incomplete: list[str] = field(default_factory=list)
    snapshot_generation: int = 0

    @property
    def max_severity(self) -> Severity | None:
        if not self.alerts:
            return None
        return max(a.severity for a in self.alerts)

    def alerts_at_or_above(self, threshold: Severity) -> list[Alert]:
        return [a for a in self.alerts if a.severity >= threshold]

    def summary(self) -> dict[str, Any]:
        """Counts for display: dependencies, alerts by severity, warnings."""
        by_severity = {s.name: 0 for s in sorted(Severity, reverse=True)}
        for alert in self.alerts:
            by_severity[alert.severity.name] += 1
        return {
            "project": self.sbom.project_name,
            "version": self.sbom.version,
            "dependencies": self.sbom.dependency_count,
            "ecosystems": list(self.ecosystems),
            "alerts": len(self.alerts),
            "by_severity": by_severity,
            "incomplete": len(self.incomplete),
            "warnings": len(self.warnings),
            "signature_chain": len(self.sbom.signature_chain),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "alerts": [a.to_dict() for a in sort_for_display(self.alerts)],
            "warnings": list(self.warnings),
            "incomplete": list(self.incomplete),
        }
