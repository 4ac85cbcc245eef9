"""Data models for alerts: Severity, AlertKind, Alert.

Alerts are terminal facts. They are produced once by the risk evaluator (or
by the orchestrator for incomplete evaluations) and never updated. Each alert
embeds a value copy of the offending ``Package`` so it stays valid after the
scan's package list and SBOM are discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Iterable

from chainguardian.core.inventory.models import Package


# ---------------------------------------------------------------------------
# Severity: Ordered alert severity levels
# ---------------------------------------------------------------------------


class Severity(IntEnum):
    """Four-level severity scale for alerts.

    The integer encoding enables direct comparison: LOW < MEDIUM < HIGH < CRITICAL.
    This aligns with CVSS v3 qualitative severity ratings.
    """

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


# CVSS qualitative rating boundaries (inclusive lower bounds).
CVSS_CRITICAL_THRESHOLD: float = 9.0
CVSS_HIGH_THRESHOLD: float = 7.0
CVSS_MEDIUM_THRESHOLD: float = 4.0


def severity_from_cvss(score: float) -> Severity:
    """Map a CVSS base score to a severity level.

    ``>= 9.0`` is CRITICAL, ``>= 7.0`` HIGH, ``>= 4.0`` MEDIUM, anything
    lower LOW. Pure and boundary-exact.
    """
    if score >= CVSS_CRITICAL_THRESHOLD:
        return Severity.CRITICAL
    if score >= CVSS_HIGH_THRESHOLD:
        return Severity.HIGH
    if score >= CVSS_MEDIUM_THRESHOLD:
        return Severity.MEDIUM
    return Severity.LOW


# ---------------------------------------------------------------------------
# AlertKind: which check produced the alert
# ---------------------------------------------------------------------------


class AlertKind(str, Enum):
    """Machine-readable alert category, for routing by downstream notifiers."""

    UNTRUSTED_SOURCE = "untrusted_source"
    VULNERABILITY = "vulnerability"
    MALICIOUS_PACKAGE = "malicious_package"
    INVALID_SIGNATURE = "invalid_signature"
    EVALUATION_INCOMPLETE = "evaluation_incomplete"


# ---------------------------------------------------------------------------
# Alert: a single security observation about one package
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Alert:
    """A single security alert about one dependency.

    Attributes:
        severity: LOW through CRITICAL.
        message: Human-readable description.
        package: Value copy of the offending package.
        detected_at: When the alert was produced (UTC).
        remediation: Advice for resolving the alert.
        kind: Which check produced the alert.
        vulnerability_id: Advisory ID for ``VULNERABILITY`` alerts, else ``""``.
    """

    severity: Severity
    message: str
    package: Package
    detected_at: datetime = field(compare=False)
    remediation: str = ""
    kind: AlertKind = AlertKind.VULNERABILITY
    vulnerability_id: str = ""

    def __post_init__(self) -> None:
        # Packages are frozen already; copy anyway so the alert never shares
        # identity with the scanner's list.
        object.__setattr__(self, "package", replace(self.package))

    @property
    def is_incomplete(self) -> bool:
        return self.kind is AlertKind.EVALUATION_INCOMPLETE

    def to_dict(self) -> dict[str, Any]:
        """Serialize with everything a notifier needs to format and dispatch."""
        return {
            "severity": self.severity.name,
            "kind": self.kind.value,
            "message": self.message,
            "package": self.package.to_dict(),
            "detected_at": self.detected_at.isoformat(),
            "remediation": self.remediation,
            "vulnerability_id": self.vulnerability_id,
        }


def sort_for_display(alerts: Iterable[Alert]) -> list[Alert]:
    """Order alerts for presentation: highest severity first, then oldest first.

    This is a display concern only; correctness never depends on
    cross-package order.
    """
    return sorted(alerts, key=lambda a: (-int(a.severity), a.detected_at))
