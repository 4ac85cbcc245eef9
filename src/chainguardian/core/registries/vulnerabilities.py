"""Vulnerability index keyed by normalized ``name@version``."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from chainguardian.core.inventory.models import Vulnerability, package_key


class VulnerabilityIndex:
    """Immutable ``(name, version) -> vulnerabilities`` mapping.

    Satisfies the ``VulnerabilityFeed`` protocol. Absence is not an error:
    an unknown package yields an empty tuple, meaning "no known
    vulnerabilities". Lookup order matches insertion order.

    Args:
        entries: Mapping of ``name@version`` keys (any case) to vulnerabilities.
    """

    __slots__ = ("_entries",)

    def __init__(
        self, entries: Mapping[str, Iterable[Vulnerability]] | None = None
    ) -> None:
        merged: dict[str, tuple[Vulnerability, ...]] = {}
        for raw_key, vulns in (entries or {}).items():
            name, sep, version = raw_key.rpartition("@")
            if not sep or not name:
                raise ValueError(f"Vulnerability index key must be name@version, got {raw_key!r}")
            key = package_key(name, version)
            merged[key] = merged.get(key, ()) + tuple(vulns)
        self._entries: Mapping[str, tuple[Vulnerability, ...]] = MappingProxyType(merged)

    @classmethod
    def from_records(
        cls, records: Iterable[tuple[str, str, Vulnerability]]
    ) -> VulnerabilityIndex:
        """Build an index from ``(name, version, vulnerability)`` triples."""
        grouped: dict[str, list[Vulnerability]] = {}
        for name, version, vuln in records:
            grouped.setdefault(package_key(name, version), []).append(vuln)
        return cls(grouped)

    def lookup(
        self, name: str, version: str, ecosystem: str = ""
    ) -> tuple[Vulnerability, ...]:
        """Vulnerabilities recorded for ``name@version``; ``ecosystem`` is ignored."""
        return self._entries.get(package_key(name, version), ())

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def vulnerability_count(self) -> int:
        return sum(len(v) for v in self._entries.values())
