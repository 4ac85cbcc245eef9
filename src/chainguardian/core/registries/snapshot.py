"""Immutable risk snapshots and the atomic snapshot store.

Concurrent workers share the registries read-only. A feed refresh never
edits a registry in place: it builds a complete new ``RiskSnapshot`` and
publishes it with ``SnapshotStore.swap``. A scan calls ``current()`` once,
so it sees either the pre- or the post-refresh state, never a mix.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

from chainguardian.core.registries.malicious import MaliciousHashRegistry
from chainguardian.core.registries.trust import TrustRegistry
from chainguardian.core.registries.vulnerabilities import VulnerabilityIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskSnapshot:
    """Read-only bundle of the three registries.

    Attributes:
        trust: Trusted-source allowlist.
        vulnerabilities: Vulnerability index.
        malicious: Known-malicious hash registry.
        generation: Monotonic counter assigned by the store on publish.
        created_at: When the snapshot object was built.
    """

    trust: TrustRegistry = field(default_factory=TrustRegistry)
    vulnerabilities: VulnerabilityIndex = field(default_factory=VulnerabilityIndex)
    malicious: MaliciousHashRegistry = field(default_factory=MaliciousHashRegistry)
    generation: int = 0
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )


class SnapshotStore:
    """Holds the current ``RiskSnapshot`` and replaces it atomically.

    Args:
        initial: Starting snapshot. Defaults to an empty snapshot with the
            default trusted sources.
    """

    def __init__(self, initial: RiskSnapshot | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = initial or RiskSnapshot()

    def current(self) -> RiskSnapshot:
        """Return the snapshot in effect right now."""
        with self._lock:
            return self._snapshot

    def swap(self, snapshot: RiskSnapshot) -> RiskSnapshot:
        """Publish ``snapshot`` and return the one it replaced.

        The stored snapshot receives the next generation number.
        """
        with self._lock:
            previous = self._snapshot
            published = RiskSnapshot(
                trust=snapshot.trust,
                vulnerabilities=snapshot.vulnerabilities,
                malicious=snapshot.malicious,
                generation=previous.generation + 1,
                created_at=snapshot.created_at,
            )
            self._snapshot = published
        logger.debug(
            "Published risk snapshot generation %d (%d vulnerable versions, "
            "%d malicious hashes)",
            published.generation,
            len(published.vulnerabilities),
            len(published.malicious),
        )
        return previous
