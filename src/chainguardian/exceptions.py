"""ChainGuardian exception hierarchy.

All public exceptions inherit from ChainGuardianError, giving callers a single
base class to catch when they want to handle any ChainGuardian-specific failure
without swallowing unrelated errors.

Only ``SigningFailure`` and ``ConfigError`` ever escape a scan. Everything
else is contained by the orchestrator and converted into warnings or alerts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from chainguardian.core.alerts.models import Alert
    from chainguardian.core.inventory.models import Package


class ChainGuardianError(Exception):
    """Base exception for all ChainGuardian errors."""


class ConfigError(ChainGuardianError):
    """Raised when configuration or registry data cannot be loaded.

    Covers unreadable files, malformed YAML/JSON, and values that fail
    validation (negative timeouts, CVSS scores outside [0, 10]).
    """


class ScanFailure(ChainGuardianError):
    """Raised by a dependency scanner when a manifest is unreadable or malformed.

    The orchestrator degrades this to an empty dependency list for the
    failing ecosystem plus a structural warning.

    Attributes:
        ecosystem: Identifier of the scanner that failed (e.g. ``"npm"``).
    """

    def __init__(self, message: str, ecosystem: str) -> None:
        super().__init__(message)
        self.message = message
        self.ecosystem = ecosystem

    def __str__(self) -> str:
        return f"[{self.ecosystem}] {self.message}"


class EvaluationFailure(ChainGuardianError):
    """Raised when a per-package risk check could not complete.

    Surfaced by the orchestrator as a LOW "evaluation incomplete" alert.

    Attributes:
        package: The package whose evaluation failed, if known.
        partial_alerts: Alerts produced before the failing check.
    """

    def __init__(
        self,
        message: str,
        package: Package | None = None,
        partial_alerts: Sequence[Alert] = (),
    ) -> None:
        super().__init__(message)
        self.package = package
        self.partial_alerts = tuple(partial_alerts)


class VerificationError(EvaluationFailure):
    """Raised by a signature verifier on transient failure.

    Distinct from a ``False`` verification result, which means the signature
    is cryptographically invalid. Network outages or an unavailable crypto
    engine raise this instead.
    """


class SigningFailure(ChainGuardianError):
    """Raised when an SBOM cannot be sealed.

    Fatal for the scan: an unsigned SBOM must never be represented as sealed,
    so no signature chain is fabricated and the error reaches the caller.
    """


class SBOMError(ChainGuardianError):
    """Raised when SBOM assembly or deserialization fails.

    Covers attempts to change the dependency list of a sealed SBOM and
    documents that cannot be read back into an ``SBOM``.
    """
