"""Read-only risk registries and the snapshot store that publishes them.

- ``TrustRegistry``: trusted source prefixes.
- ``VulnerabilityIndex``: ``name@version`` -> known vulnerabilities.
- ``MaliciousHashRegistry``: content hash -> reason it is known-malicious.
- ``RiskSnapshot``: an immutable bundle of the three, handed to workers.
- ``SnapshotStore``: holds the current snapshot and swaps it atomically.

Population and refresh belong to external feed updaters; the loader here
only turns a data file into a snapshot.
"""

from chainguardian.core.registries.loader import load_snapshot, snapshot_from_dict
from chainguardian.core.registries.malicious import MaliciousHashRegistry
from chainguardian.core.registries.snapshot import RiskSnapshot, SnapshotStore
from chainguardian.core.registries.trust import DEFAULT_TRUSTED_SOURCES, TrustRegistry
from chainguardian.core.registries.vulnerabilities import VulnerabilityIndex

__all__ = [
    "DEFAULT_TRUSTED_SOURCES",
    "MaliciousHashRegistry",
    "RiskSnapshot",
    "SnapshotStore",
    "TrustRegistry",
    "VulnerabilityIndex",
    "load_snapshot",
    "snapshot_from_dict",
]
