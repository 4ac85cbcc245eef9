"""Tests for TrustRegistry, MaliciousHashRegistry, and VulnerabilityIndex."""

from __future__ import annotations

import pytest

from chainguardian.core.registries import (
    DEFAULT_TRUSTED_SOURCES,
    MaliciousHashRegistry,
    TrustRegistry,
    VulnerabilityIndex,
)
from chainguardian.core.registries.malicious import normalize_hash
from chainguardian.feeds import VulnerabilityFeed
from tests.helpers import make_vulnerability


class TestTrustRegistry:
    def test_defaults_cover_public_registries(self) -> None:
        registry = TrustRegistry()
        assert registry.is_trusted("https://registry.npmjs.org/left-pad")
        assert registry.is_trusted("https://pypi.org/simple/requests")
        assert registry.is_trusted("https://repo1.maven.org/maven2/junit/junit/4.13.2")
        assert len(registry) == len(DEFAULT_TRUSTED_SOURCES)

    def test_prefix_match_only(self) -> None:
        registry = TrustRegistry(["https://registry.npmjs.org"])
        assert not registry.is_trusted("http://registry.npmjs.org/x")
        assert not registry.is_trusted("https://evil.example/https://registry.npmjs.org")

    def test_empty_source_is_untrusted(self) -> None:
        assert not TrustRegistry().is_trusted("")

    def test_empty_registry_trusts_nothing(self) -> None:
        assert not TrustRegistry([]).is_trusted("https://registry.npmjs.org/x")

    def test_blank_and_duplicate_prefixes_ignored(self) -> None:
        registry = TrustRegistry(["https://a", " ", "https://a", ""])
        assert registry.prefixes == ("https://a",)


class TestMaliciousHashRegistry:
    def test_reason_for_registered_hash(self) -> None:
        registry = MaliciousHashRegistry({"abc123": "typosquat"})
        assert registry.reason_for("abc123") == "typosquat"
        assert "abc123" in registry

    def test_unknown_and_empty_hash(self) -> None:
        registry = MaliciousHashRegistry({"abc123": "typosquat"})
        assert registry.reason_for("def456") is None
        assert registry.reason_for("") is None
        assert "" not in registry

    def test_hex_lookup_is_case_insensitive(self) -> None:
        registry = MaliciousHashRegistry({"sha256:ABCDEF": "bad"})
        assert registry.reason_for("sha256:abcdef") == "bad"

    def test_sri_digests_keep_case(self) -> None:
        assert normalize_hash(" sha512-AbC+/= ") == "sha512-AbC+/="
        registry = MaliciousHashRegistry({"sha512-AbCxyz": "bad"})
        assert registry.reason_for("sha512-abcxyz") is None

    def test_all_hex_sri_digest_is_not_case_folded(self) -> None:
        registry = MaliciousHashRegistry({"sha512-ABCD": "bad", "ABCDEF12": "worse"})
        assert registry.reason_for("sha512-abcd") is None
        assert registry.reason_for("abcdef12") is None
        assert registry.reason_for("sha512-ABCD") == "bad"

    def test_bare_hex_digest_is_case_folded(self) -> None:
        digest = "AB" * 32
        registry = MaliciousHashRegistry({digest: "bad"})
        assert registry.reason_for(digest.lower()) == "bad"

    def test_items_sorted(self) -> None:
        registry = MaliciousHashRegistry({"bb": "2", "aa": "1"})
        assert registry.items() == [("aa", "1"), ("bb", "2")]
        assert len(registry) == 2


class TestVulnerabilityIndex:
    def test_lookup_is_normalized(self) -> None:
        vuln = make_vulnerability()
        index = VulnerabilityIndex({"Left-Pad@1.3.0": [vuln]})
        assert index.lookup("left-pad", "1.3.0") == (vuln,)
        assert index.lookup("LEFT-PAD", " 1.3.0") == (vuln,)

    def test_unknown_package_is_empty_not_error(self) -> None:
        assert VulnerabilityIndex().lookup("nothing", "0.0.0") == ()

    def test_scoped_npm_names(self) -> None:
        vuln = make_vulnerability()
        index = VulnerabilityIndex({"@types/node@20.1.0": [vuln]})
        assert index.lookup("@types/node", "20.1.0") == (vuln,)

    def test_bad_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            VulnerabilityIndex({"no-version": []})

    def test_from_records_preserves_order(self) -> None:
        first = make_vulnerability(id="CVE-1")
        second = make_vulnerability(id="CVE-2")
        index = VulnerabilityIndex.from_records(
            [("lodash", "4.17.20", first), ("Lodash", "4.17.20", second)]
        )
        assert [v.id for v in index.lookup("lodash", "4.17.20")] == ["CVE-1", "CVE-2"]
        assert len(index) == 1
        assert index.vulnerability_count == 2

    def test_satisfies_feed_protocol(self) -> None:
        assert isinstance(VulnerabilityIndex(), VulnerabilityFeed)
