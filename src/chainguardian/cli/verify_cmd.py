"""``chainguardian verify-sbom <file>``: check an SBOM's signature chain.

Recomputes the digest of every chain entry against the document and, when
the signing key is available, re-checks the signatures made under it.

Exit Codes:
    0: Chain intact.
    1: Chain broken (tampered document, reordered or invalid entries).
    3: Unreadable SBOM or missing signing key.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from chainguardian.cli.context import (
    EXIT_FINDINGS,
    EXIT_OK,
    build_signer,
    config_option,
    fail,
    load_config,
)
from chainguardian.core.sbom import read_json
from chainguardian.exceptions import ChainGuardianError


@click.command("verify-sbom")
@click.argument("sbom_file", type=click.Path(exists=True, dir_okay=False))
@config_option
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def verify_sbom_command(
    sbom_file: str,
    config_path: str | None,
    output_format: str,
) -> None:
    """Verify the signature chain of a CycloneDX SBOM written by ``sbom``.

    Exit code 0 if the chain is intact, 1 if it is broken.
    """
    path = Path(sbom_file)
    config = load_config(path.parent, config_path)
    try:
        sbom = read_json(path)
    except ChainGuardianError as exc:
        fail(str(exc))
    errors = build_signer(config).verify_chain(sbom)

    if output_format == "json":
        click.echo(json.dumps({
            "sbom": str(path),
            "project": sbom.project_name,
            "version": sbom.version,
            "chain_length": len(sbom.signature_chain),
            "valid": not errors,
            "errors": errors,
        }, indent=2))
    else:
        from chainguardian.cli.output import print_chain_verification
        print_chain_verification(sbom, errors)
    sys.exit(EXIT_FINDINGS if errors else EXIT_OK)
