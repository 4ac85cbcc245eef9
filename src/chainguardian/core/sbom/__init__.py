"""Software Bill of Materials: assembly, signature chain, and CycloneDX export.

The SBOM lists every dependency a scan found, in scanner emission order, and
carries an append-only signature chain. Each chain entry covers the full
document as it stood when the entry was appended, including all earlier
entries, so an external verifier can confirm that the chain grew one entry
at a time and that nothing changed after the last entry.

The export format is CycloneDX 1.6 JSON, enabling:

- **Supply chain visibility**: a machine-readable inventory of every
  dependency, its origin, and its content digest.
- **Vulnerability tracking**: when a package is later found malicious,
  archived SBOMs identify affected projects quickly.
- **Tamper evidence**: the signature chain travels with the document.
"""

from chainguardian.core.sbom.cyclonedx import (
    read_json,
    sbom_from_cyclonedx,
    to_cyclonedx,
    write_json,
)
from chainguardian.core.sbom.models import SBOM, SBOMBuilder, SignatureEntry
from chainguardian.core.sbom.signer import HmacSigner, SBOMSigner, Signer

__all__ = [
    "HmacSigner",
    "SBOM",
    "SBOMBuilder",
    "SBOMSigner",
    "SignatureEntry",
    "Signer",
    "read_json",
    "sbom_from_cyclonedx",
    "to_cyclonedx",
    "write_json",
]
