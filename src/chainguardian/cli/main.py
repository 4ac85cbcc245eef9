"""ChainGuardian CLI: supply-chain risk assessment for project dependencies.

Entry point for the ``chainguardian`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan         Enumerate dependencies and report supply-chain alerts.
    sbom         Write a signed CycloneDX 1.6 SBOM for a project.
    verify-sbom  Check the signature chain of an existing SBOM file.

Usage::

    chainguardian scan ./my-service
    chainguardian scan ./my-service --format json --severity-threshold high
    chainguardian sbom ./my-service -o build/sbom.cdx.json
    chainguardian verify-sbom build/sbom.cdx.json
"""

from __future__ import annotations

import logging

import click

from chainguardian import __version__
from chainguardian.cli.sbom_cmd import sbom_command
from chainguardian.cli.scan import scan_command
from chainguardian.cli.verify_cmd import verify_sbom_command


def _configure_logging(verbose: int) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose >= 2 else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    count=True,
    help="Increase log output (-v info, -vv debug).",
)
def cli(verbose: int) -> None:
    """ChainGuardian: supply-chain risk assessment for project dependencies.

    Checks every dependency against trusted sources, known
    vulnerabilities, known-malicious hashes, and signature validity, and
    produces a signed SBOM.
    """
    _configure_logging(verbose)


cli.add_command(scan_command)
cli.add_command(sbom_command)
cli.add_command(verify_sbom_command)
