"""Data models for the SBOM: SignatureEntry, SBOM, and SBOMBuilder.

``SBOM`` is frozen. It is assembled by ``SBOMBuilder`` (created empty,
populated by appending scanner output) and sealed by ``SBOMSigner``, which
returns a new copy with one more chain entry. A sealed SBOM refuses further
dependency changes.

Canonical form
--------------
``SBOM.canonical_bytes(upto)`` is the deterministic JSON encoding (sorted
keys, compact separators, UTF-8) of the document together with the first
``upto`` signature entries. Entry *i* signs ``canonical_bytes(i)``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterable

from chainguardian.core.inventory.models import Package
from chainguardian.exceptions import SBOMError

SBOM_SCHEMA_VERSION = "1"


# ---------------------------------------------------------------------------
# SignatureEntry: one link in the signature chain
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SignatureEntry:
    """A single attestation over the SBOM state at the time it was appended.

    Attributes:
        index: Position in the chain (0-based).
        digest: ``sha256:<hex>`` of the canonical document state it covers.
        signature: Signer output over that same state.
        key_id: Identifier of the signing key.
        algorithm: Signature algorithm label (e.g. ``"hmac-sha256"``).
        signed_at: When the entry was appended (UTC).
    """

    index: int
    digest: str
    signature: str
    key_id: str
    algorithm: str
    signed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "digest": self.digest,
            "signature": self.signature,
            "key_id": self.key_id,
            "algorithm": self.algorithm,
            "signed_at": self.signed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignatureEntry:
        try:
            return cls(
                index=int(data["index"]),
                digest=str(data["digest"]),
                signature=str(data["signature"]),
                key_id=str(data.get("key_id", "")),
                algorithm=str(data.get("algorithm", "")),
                signed_at=datetime.fromisoformat(str(data["signed_at"])),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SBOMError(f"Malformed signature entry: {exc}") from exc


# ---------------------------------------------------------------------------
# SBOM: the document
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SBOM:
    """Software Bill of Materials for one project scan.

    Attributes:
        project_name: Name of the scanned project.
        version: Version of the scanned project.
        generated_at: When assembly started (UTC).
        dependencies: Packages in scanner emission order.
        signature_chain: Append-only attestations; empty until sealed.
    """

    project_name: str
    version: str
    generated_at: datetime
    dependencies: tuple[Package, ...] = field(default_factory=tuple)
    signature_chain: tuple[SignatureEntry, ...] = field(default_factory=tuple)

    @property
    def sealed(self) -> bool:
        """True once at least one signature entry has been appended."""
        return len(self.signature_chain) > 0

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)

    def with_dependencies(self, packages: Iterable[Package]) -> SBOM:
        """Return a copy with ``packages`` appended.

        Raises:
            SBOMError: If this SBOM is already sealed.
        """
        if self.sealed:
            raise SBOMError(
                f"SBOM for {self.project_name} is sealed; dependencies are frozen"
            )
        return replace(self, dependencies=self.dependencies + tuple(packages))

    def document(self, upto: int | None = None) -> dict[str, Any]:
        """The document as a plain dict, with the first ``upto`` chain entries."""
        chain = self.signature_chain if upto is None else self.signature_chain[:upto]
        return {
            "schema": SBOM_SCHEMA_VERSION,
            "projectName": self.project_name,
            "version": self.version,
            "generatedAt": self.generated_at.isoformat(),
            "dependencies": [p.to_dict() for p in self.dependencies],
            "signatureChain": [e.to_dict() for e in chain],
        }

    def canonical_bytes(self, upto: int | None = None) -> bytes:
        """Deterministic encoding of ``document(upto)``."""
        return json.dumps(
            self.document(upto), sort_keys=True, separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> SBOM:
        """Inverse of ``document()``.

        Raises:
            SBOMError: If required fields are missing or malformed.
        """
        try:
            return cls(
                project_name=str(data["projectName"]),
                version=str(data["version"]),
                generated_at=datetime.fromisoformat(str(data["generatedAt"])),
                dependencies=tuple(
                    Package.from_dict(p) for p in data.get("dependencies", [])
                ),
                signature_chain=tuple(
                    SignatureEntry.from_dict(e) for e in data.get("signatureChain", [])
                ),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SBOMError(f"Malformed SBOM document: {exc}") from exc


# ---------------------------------------------------------------------------
# SBOMBuilder: accumulate dependencies before sealing
# ---------------------------------------------------------------------------


class SBOMBuilder:
    """Accumulate packages in emission order, then build an unsealed SBOM.

    Duplicate detection is *not* performed: the same ``(name, version)``
    reported by two ecosystems is two independent entries.

    Usage::

        builder = SBOMBuilder("my-app", "1.2.0")
        builder.extend(npm_packages)
        sbom = SBOMSigner(signer).sign(builder.build())
    """

    def __init__(
        self,
        project_name: str,
        version: str,
        generated_at: datetime | None = None,
    ) -> None:
        self._project_name = project_name
        self._version = version
        self._generated_at = generated_at or datetime.now(timezone.utc)
        self._packages: list[Package] = []

    def add(self, pkg: Package) -> None:
        self._packages.append(pkg)

    def extend(self, packages: Iterable[Package]) -> None:
        self._packages.extend(packages)

    @property
    def package_count(self) -> int:
        return len(self._packages)

    def build(self) -> SBOM:
        return SBOM(
            project_name=self._project_name,
            version=self._version,
            generated_at=self._generated_at,
            dependencies=tuple(self._packages),
        )
