"""Data models for the dependency inventory: Package and Vulnerability.

Both types are frozen dataclasses. Packages are produced once per scan by a
dependency scanner and are read-only thereafter; vulnerabilities are owned by
the vulnerability index and only ever referenced by evaluation results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


# ---------------------------------------------------------------------------
# Normalized identity
# ---------------------------------------------------------------------------


def package_key(name: str, version: str) -> str:
    """Return the normalized ``name@version`` lookup key.

    Names are case-folded and stripped so that ``Left-Pad`` and ``left-pad``
    hit the same index entry. Versions are only stripped; ``1.0`` and
    ``1.0.0`` stay distinct.
    """
    return f"{name.strip().lower()}@{version.strip()}"


# ---------------------------------------------------------------------------
# Package: one resolved dependency
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Package:
    """A single resolved dependency.

    Uniquely identified by ``(name, version)`` within one scan. The same
    identity may appear in several ecosystems; each occurrence is evaluated
    independently.

    Attributes:
        name: Package name as published in its registry.
        version: Resolved version string.
        source: Origin URL or registry string the artifact was fetched from.
        hash: Content digest (e.g. ``sha512-...`` or ``sha256:<hex>``).
        signatures: Ordered signature blobs, possibly empty.
        ecosystem: Scanner identifier that produced this package.
    """

    name: str
    version: str
    source: str = ""
    hash: str = ""
    signatures: tuple[str, ...] = field(default_factory=tuple)
    ecosystem: str = ""

    def __post_init__(self) -> None:
        # Accept any iterable but store an immutable tuple.
        if not isinstance(self.signatures, tuple):
            object.__setattr__(self, "signatures", tuple(self.signatures))

    @property
    def key(self) -> str:
        """Normalized ``name@version`` key used by registry lookups."""
        return package_key(self.name, self.version)

    @property
    def label(self) -> str:
        """Human-readable ``name@version`` label."""
        return f"{self.name}@{self.version}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "source": self.source,
            "hash": self.hash,
            "signatures": list(self.signatures),
            "ecosystem": self.ecosystem,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Package:
        return cls(
            name=str(data.get("name", "")),
            version=str(data.get("version", "")),
            source=str(data.get("source", "")),
            hash=str(data.get("hash", "")),
            signatures=tuple(str(s) for s in data.get("signatures", []) or []),
            ecosystem=str(data.get("ecosystem", "")),
        )


# ---------------------------------------------------------------------------
# Vulnerability: one known advisory
# ---------------------------------------------------------------------------

CVSS_MIN: float = 0.0
CVSS_MAX: float = 10.0


@dataclass(frozen=True)
class Vulnerability:
    """A known vulnerability affecting a specific package version.

    Attributes:
        id: Advisory identifier (``CVE-2021-23337``, ``GHSA-...``).
        cvss: CVSS base score in the closed interval [0.0, 10.0].
        description: Short human-readable summary.
        fixed_in: First fixed version, or ``""`` when no fix exists.
        discovered_at: When the advisory was published, if known.

    Raises:
        ValueError: If ``cvss`` is outside [0.0, 10.0] or not numeric.
    """

    id: str
    cvss: float
    description: str = ""
    fixed_in: str = ""
    discovered_at: datetime | None = None

    def __post_init__(self) -> None:
        if isinstance(self.cvss, bool) or not isinstance(self.cvss, (int, float)):
            raise ValueError(
                f"CVSS score for {self.id!r} must be numeric, "
                f"got {type(self.cvss).__name__}"
            )
        if not CVSS_MIN <= self.cvss <= CVSS_MAX:
            raise ValueError(
                f"CVSS score for {self.id!r} must be in [0, 10], got {self.cvss}"
            )

    @property
    def has_fix(self) -> bool:
        return bool(self.fixed_in)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "cvss": self.cvss,
            "description": self.description,
            "fixed_in": self.fixed_in,
            "discovered_at": (
                self.discovered_at.isoformat() if self.discovered_at else None
            ),
        }
