"""Vulnerability feeds consulted by the risk evaluator.

The local ``VulnerabilityIndex`` is always a feed. ``OsvFeed`` adds live
lookups against the OSV database and ``ChainedFeed`` combines several feeds.

Public API::

    from chainguardian.feeds import ChainedFeed, VulnerabilityFeed
    from chainguardian.feeds.osv import OsvFeed
"""

from __future__ import annotations

from chainguardian.feeds.base import ChainedFeed, VulnerabilityFeed

__all__ = [
    "ChainedFeed",
    "VulnerabilityFeed",
]
