"""Tests for ChainedFeed composition."""

from __future__ import annotations

import pytest

from chainguardian.core.registries import VulnerabilityIndex
from chainguardian.feeds import ChainedFeed, VulnerabilityFeed
from tests.helpers import make_vulnerability


class _RecordingFeed:
    def __init__(self, *vulns) -> None:  # type: ignore[no-untyped-def]
        self.vulns = vulns
        self.calls: list[tuple[str, str, str]] = []

    def lookup(self, name: str, version: str, ecosystem: str = ""):  # type: ignore[no-untyped-def]
        self.calls.append((name, version, ecosystem))
        return self.vulns


class TestChainedFeed:
    def test_requires_a_feed(self) -> None:
        with pytest.raises(ValueError):
            ChainedFeed()

    def test_first_feed_wins_on_duplicate_ids(self) -> None:
        local = VulnerabilityIndex({"lodash@4.17.20": [make_vulnerability(id="CVE-1", cvss=7.2)]})
        remote = _RecordingFeed(
            make_vulnerability(id="CVE-1", cvss=9.9),
            make_vulnerability(id="GHSA-2", cvss=5.0),
        )
        merged = ChainedFeed(local, remote).lookup("lodash", "4.17.20", "npm")
        assert [(v.id, v.cvss) for v in merged] == [("CVE-1", 7.2), ("GHSA-2", 5.0)]
        assert remote.calls == [("lodash", "4.17.20", "npm")]

    def test_error_propagates(self) -> None:
        class Broken:
            def lookup(self, name: str, version: str, ecosystem: str = "") -> list:
                raise TimeoutError("slow")

        with pytest.raises(TimeoutError):
            ChainedFeed(VulnerabilityIndex(), Broken()).lookup("a", "1")

    def test_is_a_feed(self) -> None:
        assert isinstance(ChainedFeed(VulnerabilityIndex()), VulnerabilityFeed)
