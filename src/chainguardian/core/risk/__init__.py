"""Per-package risk evaluation.

``RiskEvaluator.evaluate`` runs the trust, vulnerability, malicious-hash and
signature checks for one package against a ``RiskSnapshot`` and returns the
resulting alerts in canonical order.
"""

from chainguardian.core.risk.evaluator import RiskEvaluator, incomplete_alert
from chainguardian.core.risk.verification import (
    AcceptAllVerifier,
    DigestSignatureVerifier,
    SignatureVerifier,
)

__all__ = [
    "AcceptAllVerifier",
    "DigestSignatureVerifier",
    "RiskEvaluator",
    "SignatureVerifier",
    "incomplete_alert",
]
