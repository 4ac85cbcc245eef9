"""Tests for SBOMSigner sealing and chain verification."""

from __future__ import annotations

from dataclasses import replace

import pytest

from chainguardian.core.sbom import SBOM, HmacSigner, SBOMBuilder, SBOMSigner
from chainguardian.core.sbom.signer import document_digest
from chainguardian.exceptions import SigningFailure
from tests.helpers import FIXED_TIME, fixed_clock, make_package


class _ExplodingSigner:
    key_id = "broken"
    algorithm = "test"

    def append_signature(self, document: bytes) -> str:
        raise OSError("HSM unreachable")


class _EmptySigner:
    key_id = "empty"
    algorithm = "test"

    def append_signature(self, document: bytes) -> str:
        return ""


def _unsealed(*names: str) -> SBOM:
    builder = SBOMBuilder("proj", "1.0.0", generated_at=FIXED_TIME)
    builder.extend(make_package(name=n) for n in names)
    return builder.build()


class TestHmacSigner:
    def test_empty_key_rejected(self) -> None:
        with pytest.raises(SigningFailure):
            HmacSigner(b"")

    def test_verify(self, hmac_signer: HmacSigner) -> None:
        sig = hmac_signer.append_signature(b"doc")
        assert hmac_signer.verify(b"doc", sig)
        assert not hmac_signer.verify(b"doc2", sig)


class TestSign:
    def test_appends_exactly_one_entry(self, sbom_signer: SBOMSigner) -> None:
        unsealed = _unsealed("a", "b")
        sealed = sbom_signer.sign(unsealed)
        assert sealed.sealed
        assert len(sealed.signature_chain) == 1
        entry = sealed.signature_chain[0]
        assert entry.index == 0
        assert entry.key_id == "test"
        assert entry.algorithm == "hmac-sha256"
        assert entry.signed_at == FIXED_TIME
        assert entry.digest == document_digest(unsealed.canonical_bytes())
        assert not unsealed.sealed

    def test_resigning_extends_the_chain(self, sbom_signer: SBOMSigner) -> None:
        once = sbom_signer.sign(_unsealed("a"))
        twice = sbom_signer.sign(once)
        assert len(twice.signature_chain) == 2
        assert twice.signature_chain[:1] == once.signature_chain
        assert twice.signature_chain[1].digest == document_digest(once.canonical_bytes())

    def test_empty_sbom_still_sealed(self, sbom_signer: SBOMSigner) -> None:
        sealed = sbom_signer.sign(_unsealed())
        assert sealed.dependency_count == 0
        assert len(sealed.signature_chain) == 1

    def test_signer_error_becomes_signing_failure(self) -> None:
        with pytest.raises(SigningFailure, match="HSM unreachable"):
            SBOMSigner(_ExplodingSigner()).sign(_unsealed("a"))

    def test_empty_signature_is_failure(self) -> None:
        with pytest.raises(SigningFailure, match="empty signature"):
            SBOMSigner(_EmptySigner()).sign(_unsealed("a"))


class TestVerifyChain:
    def test_fresh_chain_is_valid(self, sbom_signer: SBOMSigner) -> None:
        sealed = sbom_signer.sign(sbom_signer.sign(_unsealed("a", "b")))
        assert sbom_signer.verify_chain(sealed) == []

    def test_unsealed_is_reported(self, sbom_signer: SBOMSigner) -> None:
        (error,) = sbom_signer.verify_chain(_unsealed("a"))
        assert "not sealed" in error

    def test_dependency_tampering_detected(self, sbom_signer: SBOMSigner) -> None:
        sealed = sbom_signer.sign(_unsealed("a", "b"))
        tampered = replace(sealed, dependencies=(make_package(name="a"),))
        errors = sbom_signer.verify_chain(tampered)
        assert any("altered after signing" in e for e in errors)

    def test_reordered_chain_detected(self, sbom_signer: SBOMSigner) -> None:
        sealed = sbom_signer.sign(sbom_signer.sign(_unsealed("a")))
        swapped = replace(sealed, signature_chain=sealed.signature_chain[::-1])
        assert sbom_signer.verify_chain(swapped)

    def test_signature_checked_with_same_key_id(self, sbom_signer: SBOMSigner) -> None:
        sealed = sbom_signer.sign(_unsealed("a"))
        forged_entry = replace(sealed.signature_chain[0], signature="Zm9yZ2Vk")
        forged = replace(sealed, signature_chain=(forged_entry,))
        assert sbom_signer.verify_chain(forged) == ["Entry 0 signature is invalid"]

    def test_other_key_cannot_verify_signatures(self, sbom_signer: SBOMSigner) -> None:
        sealed = sbom_signer.sign(_unsealed("a"))
        other = SBOMSigner(HmacSigner(b"other-key", key_id="test"), clock=fixed_clock)
        assert other.verify_chain(sealed) == ["Entry 0 signature is invalid"]

    def test_unknown_key_id_with_recomputed_digest(self, sbom_signer: SBOMSigner) -> None:
        sealed = sbom_signer.sign(_unsealed("a"))
        swapped = replace(sealed, dependencies=(make_package(name="evil"),))
        forged_entry = replace(
            sealed.signature_chain[0],
            digest=document_digest(swapped.canonical_bytes(0)),
            signature="garbage",
            key_id="attacker",
        )
        forged = replace(swapped, signature_chain=(forged_entry,))
        (error,) = sbom_signer.verify_chain(forged)
        assert "unknown key 'attacker'" in error

    def test_primitive_without_verify_is_rejected(self) -> None:
        class _SignOnly:
            key_id = "sign-only"
            algorithm = "test"

            def append_signature(self, document: bytes) -> str:
                return "sig"

        signer = SBOMSigner(_SignOnly(), clock=fixed_clock)
        sealed = signer.sign(_unsealed("a"))
        (error,) = signer.verify_chain(sealed)
        assert "cannot verify signatures" in error
