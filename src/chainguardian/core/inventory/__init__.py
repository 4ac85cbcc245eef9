"""Dependency inventory data model.

``Package`` is the normalized dependency record every ecosystem scanner
emits, and ``Vulnerability`` is the advisory record owned by the
vulnerability index.
"""

from chainguardian.core.inventory.models import (
    Package,
    Vulnerability,
    package_key,
)

__all__ = [
    "Package",
    "Vulnerability",
    "package_key",
]
