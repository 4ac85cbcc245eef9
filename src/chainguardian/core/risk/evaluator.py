"""RiskEvaluator: the four independent checks for one package.

Canonical alert order for a package:

1. Untrusted source (HIGH).
2. One alert per vulnerability, in the order the index returns them,
   severity derived from CVSS.
3. Known-malicious hash (CRITICAL). Never suppressed by trust or by a valid
   signature: a maliciously-published, validly-signed package still fires.
4. Invalid signature (HIGH), evaluated only when the package carries
   signatures. An unsigned package is a weaker posture, not an error.

``evaluate`` is pure with respect to the snapshot: the same package against
the same snapshot yields equal alerts in the same order. Timestamps come
from an injectable clock and are excluded from alert equality.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from chainguardian.core.alerts.models import (
    Alert,
    AlertKind,
    Severity,
    severity_from_cvss,
)
from chainguardian.core.inventory.models import Package, Vulnerability
from chainguardian.core.registries.snapshot import RiskSnapshot
from chainguardian.core.risk.verification import AcceptAllVerifier, SignatureVerifier
from chainguardian.exceptions import EvaluationFailure, VerificationError
from chainguardian.feeds.base import VulnerabilityFeed

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

REMEDIATION_UNTRUSTED = "Switch to a trusted repository"
REMEDIATION_MALICIOUS = "Remove immediately, investigate compromise"
REMEDIATION_SIGNATURE = "Verify package integrity and source before use"
REMEDIATION_INCOMPLETE = "Re-run the scan; review this package manually if it persists"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _vulnerability_remediation(vuln: Vulnerability) -> str:
    if vuln.has_fix:
        return f"Update to version {vuln.fixed_in} or later"
    return "No fixed version is available; consider replacing or isolating the package"


def incomplete_alert(pkg: Package, reason: str, *, clock: Clock = _utcnow) -> Alert:
    """LOW-confidence alert for a package whose evaluation did not finish."""
    return Alert(
        severity=Severity.LOW,
        message=f"evaluation incomplete for {pkg.label}: {reason}",
        package=pkg,
        detected_at=clock(),
        remediation=REMEDIATION_INCOMPLETE,
        kind=AlertKind.EVALUATION_INCOMPLETE,
    )


class RiskEvaluator:
    """Evaluate single packages against a risk snapshot.

    The evaluator holds no mutable state; one instance is shared by all
    workers of a scan.

    Args:
        snapshot: Registries to evaluate against.
        verifier: Signature verification collaborator. Defaults to
            ``AcceptAllVerifier``, which is logged at INFO because signed
            packages then pass the signature check unchecked.
        feed: Vulnerability source. Defaults to the snapshot's index; pass a
            ``ChainedFeed`` to add remote lookups.
        clock: Timestamp source for ``Alert.detected_at``.
    """

    def __init__(
        self,
        snapshot: RiskSnapshot,
        verifier: SignatureVerifier | None = None,
        feed: VulnerabilityFeed | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._snapshot = snapshot
        if verifier is None:
            logger.info(
                "No signature verifier configured; package signatures are "
                "accepted without checking"
            )
            verifier = AcceptAllVerifier()
        self._verifier = verifier
        self._feed = feed if feed is not None else snapshot.vulnerabilities
        self._clock = clock

    @property
    def snapshot(self) -> RiskSnapshot:
        return self._snapshot

    # -- Public API ---------------------------------------------------------

    def evaluate(self, pkg: Package) -> list[Alert]:
        """Run all four checks and return alerts in canonical order.

        Raises:
            EvaluationFailure: If a collaborator (vulnerability feed,
                signature verifier) could not complete. ``partial_alerts``
                holds whatever was produced before the failing check.
        """
        alerts: list[Alert] = []
        alerts.extend(self.check_trust(pkg))
        try:
            alerts.extend(self.check_vulnerabilities(pkg))
        except EvaluationFailure as exc:
            raise type(exc)(str(exc), package=pkg, partial_alerts=alerts) from exc
        alerts.extend(self.check_malicious_hash(pkg))
        try:
            alerts.extend(self.check_signatures(pkg))
        except EvaluationFailure as exc:
            raise type(exc)(str(exc), package=pkg, partial_alerts=alerts) from exc
        return alerts

    # -- Individual checks --------------------------------------------------

    def check_trust(self, pkg: Package) -> list[Alert]:
        if self._snapshot.trust.is_trusted(pkg.source):
            return []
        source = pkg.source or "<unknown>"
        return [Alert(
            severity=Severity.HIGH,
            message=f"Package {pkg.label} from untrusted source: {source}",
            package=pkg,
            detected_at=self._clock(),
            remediation=REMEDIATION_UNTRUSTED,
            kind=AlertKind.UNTRUSTED_SOURCE,
        )]

    def check_vulnerabilities(self, pkg: Package) -> list[Alert]:
        vulns = self._lookup(pkg)
        return [
            Alert(
                severity=severity_from_cvss(v.cvss),
                message=(
                    f"Vulnerability {v.id} (CVSS {v.cvss:.1f}) found in "
                    f"{pkg.label}: {v.description}"
                ),
                package=pkg,
                detected_at=self._clock(),
                remediation=_vulnerability_remediation(v),
                kind=AlertKind.VULNERABILITY,
                vulnerability_id=v.id,
            )
            for v in vulns
        ]

    def check_malicious_hash(self, pkg: Package) -> list[Alert]:
        reason = self._snapshot.malicious.reason_for(pkg.hash)
        if reason is None:
            return []
        return [Alert(
            severity=Severity.CRITICAL,
            message=f"MALICIOUS PACKAGE DETECTED: {pkg.label} - {reason}",
            package=pkg,
            detected_at=self._clock(),
            remediation=REMEDIATION_MALICIOUS,
            kind=AlertKind.MALICIOUS_PACKAGE,
        )]

    def check_signatures(self, pkg: Package) -> list[Alert]:
        if not pkg.signatures:
            return []
        try:
            valid = self._verifier.verify(pkg)
        except VerificationError:
            raise
        except Exception as exc:
            raise VerificationError(
                f"Signature verification failed for {pkg.label}: {exc}", package=pkg
            ) from exc
        if valid:
            return []
        return [Alert(
            severity=Severity.HIGH,
            message=f"Invalid signature for package {pkg.label}",
            package=pkg,
            detected_at=self._clock(),
            remediation=REMEDIATION_SIGNATURE,
            kind=AlertKind.INVALID_SIGNATURE,
        )]

    # -- Internal helpers ---------------------------------------------------

    def _lookup(self, pkg: Package) -> Sequence[Vulnerability]:
        try:
            return tuple(self._feed.lookup(pkg.name, pkg.version, pkg.ecosystem))
        except EvaluationFailure:
            raise
        except Exception as exc:
            raise EvaluationFailure(
                f"Vulnerability lookup failed for {pkg.label}: {exc}", package=pkg
            ) from exc
