"""``chainguardian sbom <path>``: write a signed CycloneDX SBOM.

Runs a full scan of the target directory and writes the sealed SBOM, with
vulnerability findings attached, as CycloneDX 1.6 JSON.

Exit Codes:
    0: SBOM written.
    2: No dependencies found in the target path (an SBOM is still written).
    3: Configuration or signing failure.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from chainguardian.cli.context import (
    EXIT_NO_DEPENDENCIES,
    EXIT_OK,
    build_orchestrator,
    config_option,
    data_option,
    fail,
    load_config,
)
from chainguardian.core.sbom import write_json
from chainguardian.exceptions import ChainGuardianError


@click.command("sbom")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@config_option
@data_option
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output path for the SBOM (default: <path>/sbom.cdx.json).",
)
def sbom_command(
    path: str,
    config_path: str | None,
    data_file: str | None,
    output: str | None,
) -> None:
    """Generate a signed CycloneDX 1.6 SBOM for a project.

    Scans PATH, evaluates every dependency, seals the SBOM with the
    configured signing key, and writes it as JSON.
    """
    target = Path(path)
    config = load_config(
        target, config_path, data_file=Path(data_file) if data_file else None
    )
    try:
        report = build_orchestrator(config).run(target)
        out_path = Path(output) if output else target / "sbom.cdx.json"
        write_json(report.sbom, out_path, report.alerts)
    except (ChainGuardianError, OSError) as exc:
        fail(str(exc))

    from chainguardian.cli.output import print_sbom_summary
    print_sbom_summary(report.sbom, len(report.alerts))
    click.echo(f"\nSBOM written to: {out_path}")
    sys.exit(EXIT_NO_DEPENDENCIES if report.sbom.dependency_count == 0 else EXIT_OK)
