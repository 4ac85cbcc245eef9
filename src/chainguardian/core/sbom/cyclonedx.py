"""CycloneDX 1.6 export and import for ChainGuardian SBOMs.

The SBOM is rendered as a Python dict and serialised via ``json.dumps``.
This avoids a hard runtime dependency on ``cyclonedx-python-lib`` while still
producing output that validates against the CycloneDX 1.6 JSON schema.

Everything needed to re-verify the signature chain is preserved in
``chainguardian:*`` properties, so ``sbom_from_cyclonedx(to_cyclonedx(s))``
yields an SBOM whose chain verifies exactly as ``s`` does.

References
----------
.. [CDX16] CycloneDX Specification v1.6 (2024). https://cyclonedx.org/specification/overview/
.. [PURL]  Package URL specification. https://github.com/package-url/purl-spec
"""

from __future__ import annotations

import base64
import binascii
import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from chainguardian import __version__
from chainguardian.core.alerts.models import Alert, AlertKind
from chainguardian.core.inventory.models import Package
from chainguardian.core.sbom.models import SBOM, SignatureEntry
from chainguardian.exceptions import SBOMError

_PURL_TYPES: dict[str, str] = {
    "npm": "npm",
    "python": "pypi",
    "pypi": "pypi",
    "maven": "maven",
}

_CDX_HASH_ALGS: dict[str, str] = {
    "sha1": "SHA-1",
    "sha256": "SHA-256",
    "sha384": "SHA-384",
    "sha512": "SHA-512",
}


# ---------------------------------------------------------------------------
# Component helpers
# ---------------------------------------------------------------------------


def purl_for(pkg: Package) -> str:
    """Package URL for a dependency.

    Maven names in ``group:artifact`` form map to ``pkg:maven/group/artifact``;
    unknown ecosystems use the ``generic`` type.
    """
    purl_type = _PURL_TYPES.get(pkg.ecosystem.lower(), "generic")
    name = pkg.name
    if purl_type == "maven" and ":" in name:
        name = name.replace(":", "/", 1)
    elif purl_type == "npm" and name.startswith("@"):
        name = "%40" + name[1:]
    return f"pkg:{purl_type}/{name}@{pkg.version}"


def _cdx_hashes(content_hash: str) -> list[dict[str, str]]:
    """Translate ``algo:hex`` or SRI ``algo-base64`` digests to CycloneDX hashes."""
    if not content_hash:
        return []
    for sep in (":", "-"):
        algo, found, digest = content_hash.partition(sep)
        cdx_alg = _CDX_HASH_ALGS.get(algo.lower())
        if not found or cdx_alg is None:
            continue
        if sep == "-":
            try:
                digest = base64.b64decode(digest, validate=True).hex()
            except (binascii.Error, ValueError):
                return []
        if digest and all(c in "0123456789abcdefABCDEF" for c in digest):
            return [{"alg": cdx_alg, "content": digest.lower()}]
    return []


def _component(pkg: Package, bom_ref: str) -> dict[str, Any]:
    props: list[dict[str, str]] = [
        {"name": "chainguardian:ecosystem", "value": pkg.ecosystem},
        {"name": "chainguardian:hash", "value": pkg.hash},
        {"name": "chainguardian:signatures", "value": json.dumps(list(pkg.signatures))},
    ]
    component: dict[str, Any] = {
        "type": "library",
        "bom-ref": bom_ref,
        "name": pkg.name,
        "version": pkg.version,
        "purl": purl_for(pkg),
        "properties": props,
    }
    hashes = _cdx_hashes(pkg.hash)
    if hashes:
        component["hashes"] = hashes
    if pkg.source:
        component["externalReferences"] = [{"type": "distribution", "url": pkg.source}]
    return component


def _bom_refs(packages: Iterable[Package]) -> list[str]:
    refs: list[str] = []
    seen: dict[str, int] = {}
    for pkg in packages:
        purl = purl_for(pkg)
        seen[purl] = seen.get(purl, 0) + 1
        refs.append(purl if seen[purl] == 1 else f"{purl}#{seen[purl]}")
    return refs


def _vulnerabilities(alerts: Iterable[Alert], refs: dict[Package, str]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for alert in alerts:
        if alert.kind is not AlertKind.VULNERABILITY:
            continue
        entry: dict[str, Any] = {
            "id": alert.vulnerability_id,
            "description": alert.message,
            "ratings": [{"severity": alert.severity.name.lower(), "method": "CVSSv3"}],
            "recommendation": alert.remediation,
        }
        ref = refs.get(alert.package)
        if ref:
            entry["affects"] = [{"ref": ref}]
        out.append(entry)
    return out


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def to_cyclonedx(sbom: SBOM, alerts: Iterable[Alert] = ()) -> dict[str, Any]:
    """Render the SBOM as a CycloneDX 1.6 dict.

    Args:
        sbom: The (normally sealed) SBOM.
        alerts: Optional scan alerts; vulnerability alerts become
            CycloneDX ``vulnerabilities`` entries.
    """
    refs = _bom_refs(sbom.dependencies)
    first_ref: dict[Package, str] = {}
    for pkg, ref in zip(sbom.dependencies, refs):
        first_ref.setdefault(pkg, ref)

    bom: dict[str, Any] = {
        "bomFormat": "CycloneDX",
        "specVersion": "1.6",
        "version": 1,
        "serialNumber": f"urn:uuid:{uuid.uuid4()}",
        "metadata": {
            "timestamp": sbom.generated_at.isoformat(),
            "tools": {
                "components": [
                    {"type": "application", "name": "chainguardian", "version": __version__}
                ]
            },
            "component": {
                "type": "application",
                "name": sbom.project_name,
                "version": sbom.version,
            },
            "properties": [
                {
                    "name": "chainguardian:signature-chain",
                    "value": json.dumps([e.to_dict() for e in sbom.signature_chain]),
                },
            ],
        },
        "components": [_component(p, r) for p, r in zip(sbom.dependencies, refs)],
    }
    vulns = _vulnerabilities(alerts, first_ref)
    if vulns:
        bom["vulnerabilities"] = vulns
    return bom


def write_json(sbom: SBOM, path: Path, alerts: Iterable[Alert] = ()) -> None:
    """Write the CycloneDX document, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(to_cyclonedx(sbom, alerts), indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def _props(node: dict[str, Any]) -> dict[str, str]:
    return {
        str(p.get("name")): str(p.get("value", ""))
        for p in node.get("properties", []) or []
        if isinstance(p, dict)
    }


def _package_from_component(component: dict[str, Any]) -> Package:
    props = _props(component)
    refs = component.get("externalReferences", []) or []
    source = next(
        (str(r.get("url", "")) for r in refs
         if isinstance(r, dict) and r.get("type") == "distribution"),
        "",
    )
    return Package(
        name=str(component["name"]),
        version=str(component.get("version", "")),
        source=source,
        hash=props.get("chainguardian:hash", ""),
        signatures=tuple(json.loads(props.get("chainguardian:signatures", "[]"))),
        ecosystem=props.get("chainguardian:ecosystem", ""),
    )


def sbom_from_cyclonedx(data: dict[str, Any]) -> SBOM:
    """Rebuild an ``SBOM`` from a document produced by ``to_cyclonedx``.

    Raises:
        SBOMError: If the document is not a ChainGuardian CycloneDX SBOM.
    """
    if data.get("bomFormat") != "CycloneDX":
        raise SBOMError("Not a CycloneDX document")
    try:
        metadata = data["metadata"]
        project = metadata["component"]
        chain_raw = json.loads(_props(metadata).get("chainguardian:signature-chain", "[]"))
        return SBOM(
            project_name=str(project["name"]),
            version=str(project.get("version", "")),
            generated_at=datetime.fromisoformat(str(metadata["timestamp"])),
            dependencies=tuple(
                _package_from_component(c) for c in data.get("components", [])
            ),
            signature_chain=tuple(SignatureEntry.from_dict(e) for e in chain_raw),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SBOMError(f"Malformed CycloneDX SBOM: {exc}") from exc


def read_json(path: Path) -> SBOM:
    """Read a CycloneDX SBOM file written by ``write_json``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SBOMError(f"Cannot read SBOM {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SBOMError(f"SBOM {path} is not a JSON object")
    return sbom_from_cyclonedx(data)
