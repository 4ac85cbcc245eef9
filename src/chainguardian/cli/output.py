"""Rich output formatting helpers for the ChainGuardian CLI.

Provides consistent, severity-colored terminal output for scan reports,
live alerts, SBOM summaries, and chain verification results.

Severity Color Mapping:
    CRITICAL = bold red, HIGH = yellow, MEDIUM = cyan, LOW = green
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chainguardian.core.alerts import Alert, Severity, sort_for_display
from chainguardian.core.orchestrator import ScanReport
from chainguardian.core.sbom import SBOM

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "yellow",
    Severity.MEDIUM: "cyan",
    Severity.LOW: "green",
}

console = Console()


def severity_style(severity: Severity) -> str:
    """Return the Rich style string for a given severity level."""
    return _SEVERITY_STYLES.get(severity, "white")


def print_alert_line(alert: Alert) -> None:
    """Print one alert as it arrives from the alert stream."""
    console.print(
        Text.assemble(
            (f"[{alert.severity.name}] ", severity_style(alert.severity)),
            (alert.message, ""),
        )
    )


def print_scan_report(report: ScanReport, threshold: Severity) -> None:
    """Print the alert table and summary for one scan.

    Args:
        report: The completed scan report.
        threshold: Alerts below this severity are counted but not listed.
    """
    summary = report.summary()
    header = Text.assemble(
        ("Project: ", "bold"), (f"{summary['project']}@{summary['version']}", ""),
        ("  Ecosystems: ", "bold"), (", ".join(summary["ecosystems"]) or "-", "dim"),
    )
    console.print(Panel(header, title="ChainGuardian Scan"))

    shown = sort_for_display(report.alerts_at_or_above(threshold))
    if shown:
        table = Table(title="Alerts", show_header=True, header_style="bold")
        table.add_column("Severity", justify="center")
        table.add_column("Package", style="bold")
        table.add_column("Message")
        table.add_column("Remediation", style="dim")
        for alert in shown:
            table.add_row(
                Text(alert.severity.name, style=severity_style(alert.severity)),
                alert.package.label,
                alert.message,
                alert.remediation,
            )
        console.print(table)
    elif report.alerts:
        console.print(
            f"[green]No alerts at or above {threshold.name}.[/green] "
            f"[dim]({len(report.alerts)} below threshold)[/dim]"
        )
    else:
        console.print("[green]No alerts. All dependencies passed every check.[/green]")

    for warning in report.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")
    _print_scan_summary(summary)


def _print_scan_summary(summary: dict[str, Any]) -> None:
    """Print a one-line summary after the alert table."""
    parts = [f"[bold]{summary['dependencies']}[/bold] dependencies scanned"]
    for name, count in summary["by_severity"].items():
        if count:
            style = severity_style(Severity[name])
            parts.append(f"[{style}]{count} {name.lower()}[/{style}]")
    if summary["incomplete"]:
        parts.append(f"[dim]{summary['incomplete']} incomplete[/dim]")
    parts.append(f"signature chain: {summary['signature_chain']}")
    console.print(" | ".join(parts))


def print_sbom_summary(sbom: SBOM, alert_count: int) -> None:
    """Print a summary of a generated SBOM."""
    console.print(
        Panel(f"[bold]{sbom.project_name}@{sbom.version}[/bold]", title="SBOM Summary")
    )
    console.print(f"  Dependencies:    [bold]{sbom.dependency_count}[/bold]")
    console.print(f"  Alerts recorded: {alert_count}")
    console.print(f"  Chain entries:   {len(sbom.signature_chain)}")

    ecosystems: dict[str, int] = {}
    for pkg in sbom.dependencies:
        key = pkg.ecosystem or "unknown"
        ecosystems[key] = ecosystems.get(key, 0) + 1
    if ecosystems:
        eco_table = Table(title="Ecosystem Distribution", show_header=True)
        eco_table.add_column("Ecosystem", style="bold")
        eco_table.add_column("Count", justify="right")
        for name, count in sorted(ecosystems.items()):
            eco_table.add_row(name, str(count))
        console.print(eco_table)


def print_chain_verification(sbom: SBOM, errors: list[str]) -> None:
    """Print the signature chain and the outcome of verifying it."""
    table = Table(title="Signature Chain", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Key ID", style="bold")
    table.add_column("Algorithm", style="dim")
    table.add_column("Signed At")
    table.add_column("Digest", style="dim")
    for entry in sbom.signature_chain:
        table.add_row(
            str(entry.index), entry.key_id, entry.algorithm,
            entry.signed_at.isoformat(), entry.digest[:23],
        )
    console.print(table)
    if errors:
        for error in errors:
            console.print(f"  [red]- {error}[/red]")
        console.print(Panel("[bold red]Chain verification FAILED[/bold red]"))
    else:
        console.print(Panel("[bold green]Chain verification passed[/bold green]"))
