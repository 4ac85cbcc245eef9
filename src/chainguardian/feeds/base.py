"""Feed protocol and feed composition."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from chainguardian.core.inventory.models import Vulnerability


@runtime_checkable
class VulnerabilityFeed(Protocol):
    """Source of known vulnerabilities for a package version.

    ``lookup`` returns an empty sequence for unknown packages; it never
    signals absence with an exception. ``ecosystem`` is a hint for feeds
    that namespace packages by ecosystem and may be ignored.
    """

    def lookup(
        self, name: str, version: str, ecosystem: str = ""
    ) -> Sequence[Vulnerability]: ...


class ChainedFeed:
    """Query several feeds in order and merge their results.

    Results are de-duplicated by vulnerability ID; the first feed to report
    an ID wins, so list the authoritative local index first. A failing feed
    propagates its exception; the evaluator turns that into an incomplete
    evaluation rather than silently returning fewer vulnerabilities.
    """

    def __init__(self, *feeds: VulnerabilityFeed) -> None:
        if not feeds:
            raise ValueError("ChainedFeed needs at least one feed")
        self._feeds = feeds

    def lookup(
        self, name: str, version: str, ecosystem: str = ""
    ) -> tuple[Vulnerability, ...]:
        seen: set[str] = set()
        merged: list[Vulnerability] = []
        for feed in self._feeds:
            for vuln in feed.lookup(name, version, ecosystem):
                if vuln.id not in seen:
                    seen.add(vuln.id)
                    merged.append(vuln)
        return tuple(merged)
