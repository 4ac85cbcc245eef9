"""``chainguardian scan <path>``: assess a project's dependencies.

Enumerates dependencies with every applicable ecosystem scanner, evaluates
each one against the configured risk registries, seals an SBOM, and prints
the prioritized alerts.

Exit Codes:
    0: No alerts at or above the severity threshold.
    1: One or more alerts at or above the severity threshold.
    2: No dependencies found in the target path.
    3: Configuration or signing failure.
"""

from __future__ import annotations

import json
import sys
import threading
from pathlib import Path

import click

from chainguardian.cli.context import (
    EXIT_FINDINGS,
    EXIT_NO_DEPENDENCIES,
    EXIT_OK,
    SEVERITY_MAP,
    build_orchestrator,
    config_option,
    data_option,
    fail,
    load_config,
)
from chainguardian.config import GuardianConfig
from chainguardian.core.alerts import AlertStream
from chainguardian.core.orchestrator import ScanReport
from chainguardian.exceptions import ChainGuardianError


def _run_with_live_alerts(
    path: Path, config: GuardianConfig, output_format: str
) -> ScanReport:
    """Run the scan while a consumer thread prints alerts from the stream."""
    from chainguardian.cli.output import print_alert_line

    stream = AlertStream(config.alert_buffer)
    orchestrator = build_orchestrator(config, stream=stream)

    def consume() -> None:
        for alert in stream:
            if output_format == "text":
                print_alert_line(alert)

    consumer = threading.Thread(target=consume, name="chainguardian-alerts", daemon=True)
    consumer.start()
    try:
        return orchestrator.run(path)
    finally:
        stream.close()
        consumer.join()


@click.command("scan")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@config_option
@data_option
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@click.option(
    "--severity-threshold",
    type=click.Choice(["low", "medium", "high", "critical"]),
    default="low",
    help="Minimum severity that fails the scan (default: low).",
)
@click.option(
    "--workers", "max_workers",
    type=click.IntRange(min=1),
    default=None,
    help="Packages evaluated in parallel.",
)
@click.option(
    "--timeout", "package_timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds allowed per package evaluation.",
)
@click.option(
    "--deadline", "scan_deadline",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds allowed for the whole scan.",
)
@click.option(
    "--first-match-only",
    is_flag=True,
    default=False,
    help="Scan only the highest-priority ecosystem found.",
)
@click.option(
    "--osv",
    is_flag=True,
    default=False,
    help="Also query the OSV database (requires the 'feeds' extra).",
)
@click.option(
    "--live",
    is_flag=True,
    default=False,
    help="Print alerts as packages finish evaluating.",
)
def scan_command(
    path: str,
    config_path: str | None,
    data_file: str | None,
    output_format: str,
    severity_threshold: str,
    max_workers: int | None,
    package_timeout: float | None,
    scan_deadline: float | None,
    first_match_only: bool,
    osv: bool,
    live: bool,
) -> None:
    """Assess the supply-chain risk of a project's dependencies.

    Scans PATH for npm, Python, and Maven manifests, checks every
    dependency, and reports alerts ordered by severity.

    Exit code 0 if clean, 1 if alerts meet the threshold, 2 if no
    dependencies were found, 3 on configuration or signing failure.
    """
    target = Path(path)
    config = load_config(
        target,
        config_path,
        data_file=Path(data_file) if data_file else None,
        max_workers=max_workers,
        package_timeout=package_timeout,
        scan_deadline=scan_deadline,
        first_match_only=first_match_only or None,
        osv=osv or None,
    )

    try:
        if live:
            report = _run_with_live_alerts(target, config, output_format)
        else:
            report = build_orchestrator(config).run(target)
    except ChainGuardianError as exc:
        fail(str(exc))

    threshold = SEVERITY_MAP[severity_threshold]
    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        from chainguardian.cli.output import print_scan_report
        print_scan_report(report, threshold)

    if report.sbom.dependency_count == 0:
        if output_format == "text":
            click.echo("No dependencies found in the target directory.")
        sys.exit(EXIT_NO_DEPENDENCIES)
    sys.exit(EXIT_FINDINGS if report.alerts_at_or_above(threshold) else EXIT_OK)
