"""SBOMSigner: sequencing and integrity of the SBOM signature chain.

The cryptographic primitive is a collaborator behind the ``Signer``
protocol. ``SBOMSigner`` only decides *what* gets signed and keeps the chain
append-only:

- Each ``sign`` call appends exactly one entry.
- The entry covers ``sbom.canonical_bytes()`` at call time, which includes
  every earlier entry.
- Any primitive failure raises ``SigningFailure``; no entry is fabricated
  and the caller never receives an SBOM that looks sealed but is not.

``HmacSigner`` is the bundled primitive (HMAC-SHA256, base64 output), in the
style of in-toto/DSSE shared-key attestations.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Protocol, runtime_checkable

from chainguardian.core.sbom.models import SBOM, SignatureEntry
from chainguardian.exceptions import SigningFailure

logger = logging.getLogger(__name__)


@runtime_checkable
class Signer(Protocol):
    """Cryptographic signing primitive.

    Attributes:
        key_id: Identifier recorded in each chain entry.
        algorithm: Algorithm label recorded in each chain entry.
    """

    key_id: str
    algorithm: str

    def append_signature(self, document: bytes) -> str:
        """Return a signature over ``document``."""
        ...


class HmacSigner:
    """HMAC-SHA256 signing primitive.

    Args:
        key: Secret key. Must be non-empty.
        key_id: Identifier recorded in chain entries.
    """

    algorithm = "hmac-sha256"

    def __init__(self, key: bytes, key_id: str = "default") -> None:
        if not key:
            raise SigningFailure("HMAC signing key must not be empty")
        self._key = key
        self.key_id = key_id

    def append_signature(self, document: bytes) -> str:
        mac = hmac.new(self._key, document, hashlib.sha256).digest()
        return base64.b64encode(mac).decode("ascii")

    def verify(self, document: bytes, signature: str) -> bool:
        return hmac.compare_digest(self.append_signature(document), signature)


def document_digest(document: bytes) -> str:
    return f"sha256:{hashlib.sha256(document).hexdigest()}"


class SBOMSigner:
    """Append signature entries to SBOMs and verify existing chains.

    Args:
        signer: The signing primitive.
        clock: Timestamp source for ``SignatureEntry.signed_at``.
    """

    def __init__(
        self,
        signer: Signer,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._signer = signer
        self._clock = clock

    def sign(self, sbom: SBOM) -> SBOM:
        """Return a sealed copy of ``sbom`` with one new chain entry.

        Raises:
            SigningFailure: If the primitive fails or returns no signature.
        """
        state = sbom.canonical_bytes()
        try:
            signature = self._signer.append_signature(state)
        except SigningFailure:
            raise
        except Exception as exc:
            raise SigningFailure(
                f"Signing SBOM for {sbom.project_name} failed: {exc}"
            ) from exc
        if not isinstance(signature, str) or not signature:
            raise SigningFailure(
                f"Signer {self._signer.key_id!r} returned an empty signature"
            )

        entry = SignatureEntry(
            index=len(sbom.signature_chain),
            digest=document_digest(state),
            signature=signature,
            key_id=self._signer.key_id,
            algorithm=self._signer.algorithm,
            signed_at=self._clock(),
        )
        logger.debug(
            "Appended signature entry %d to SBOM %s@%s",
            entry.index, sbom.project_name, sbom.version,
        )
        return replace(sbom, signature_chain=sbom.signature_chain + (entry,))

    def verify_chain(self, sbom: SBOM) -> list[str]:
        """Check that every entry covers the document state it was appended to.

        Digests are always recomputed. Every signature must also be checked
        by the primitive's ``verify(document, signature)`` under the entry's
        ``key_id``; an entry that cannot be checked is an error.

        Returns:
            Problems found. Empty means the chain is intact.
        """
        if not sbom.signature_chain:
            return ["SBOM is not sealed: signature chain is empty"]

        verify = getattr(self._signer, "verify", None)
        if not callable(verify):
            return [
                f"Signer {self._signer.key_id!r} cannot verify signatures; "
                f"chain cannot be verified"
            ]

        errors: list[str] = []
        for position, entry in enumerate(sbom.signature_chain):
            if entry.index != position:
                errors.append(
                    f"Entry {position} has index {entry.index}; chain was reordered "
                    f"or truncated"
                )
            state = sbom.canonical_bytes(upto=position)
            if entry.digest != document_digest(state):
                errors.append(
                    f"Entry {position} digest does not match the document; "
                    f"SBOM was altered after signing"
                )
                continue
            if entry.key_id != self._signer.key_id:
                errors.append(
                    f"Entry {position} signed with unknown key {entry.key_id!r}; "
                    f"cannot be verified"
                )
            elif not verify(state, entry.signature):
                errors.append(f"Entry {position} signature is invalid")
        return errors
