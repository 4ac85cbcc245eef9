"""Signature verification collaborators.

The evaluator only depends on the ``SignatureVerifier`` protocol. The
verifiers here are deliberately small reference implementations:

- ``DigestSignatureVerifier`` checks HMAC-SHA256 attestations of the form
  ``sha256=<hex>`` over ``name@version:hash``.
- ``AcceptAllVerifier`` treats every signature as valid, for pipelines
  where signatures are checked elsewhere.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Protocol, runtime_checkable

from chainguardian.core.inventory.models import Package
from chainguardian.exceptions import VerificationError

SIGNATURE_PREFIX = "sha256="


@runtime_checkable
class SignatureVerifier(Protocol):
    """Verifies a package's signatures.

    ``verify`` returns ``False`` when the signatures are cryptographically
    invalid and raises ``VerificationError`` when verification could not be
    performed at all.
    """

    def verify(self, pkg: Package) -> bool: ...


class AcceptAllVerifier:
    """Verifier that accepts every signature."""

    def verify(self, pkg: Package) -> bool:
        return True


def signing_payload(pkg: Package) -> bytes:
    """The byte string a package attestation covers."""
    return f"{pkg.name}@{pkg.version}:{pkg.hash}".encode("utf-8")


def attest(pkg: Package, key: bytes) -> str:
    """Produce a ``sha256=<hex>`` attestation accepted by ``DigestSignatureVerifier``."""
    digest = hmac.new(key, signing_payload(pkg), hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


class DigestSignatureVerifier:
    """HMAC-SHA256 package attestation verifier.

    A package verifies iff every signature blob equals ``attest(pkg, key)``.
    Unknown signature formats count as invalid.

    Args:
        key: Shared verification key. ``None`` or empty means the key is
            unavailable, and every call raises ``VerificationError``.
    """

    def __init__(self, key: bytes | None) -> None:
        self._key = key or b""

    def verify(self, pkg: Package) -> bool:
        if not self._key:
            raise VerificationError(
                f"No verification key configured; cannot verify {pkg.label}",
                package=pkg,
            )
        expected = attest(pkg, self._key)
        return all(hmac.compare_digest(sig.strip(), expected) for sig in pkg.signatures)
