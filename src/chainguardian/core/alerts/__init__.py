"""Security alerts: severity scale, alert records, and the bounded alert stream."""

from chainguardian.core.alerts.models import (
    Alert,
    AlertKind,
    Severity,
    severity_from_cvss,
    sort_for_display,
)
from chainguardian.core.alerts.stream import AlertStream, AlertStreamTimeout

__all__ = [
    "Alert",
    "AlertKind",
    "AlertStream",
    "AlertStreamTimeout",
    "Severity",
    "severity_from_cvss",
    "sort_for_display",
]
