"""Shared wiring for CLI commands: configuration and orchestrator assembly."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from chainguardian.config import GuardianConfig
from chainguardian.core.alerts import AlertStream, Severity
from chainguardian.core.orchestrator import ScanOrchestrator
from chainguardian.core.risk import DigestSignatureVerifier
from chainguardian.core.sbom import HmacSigner, SBOMSigner
from chainguardian.exceptions import ChainGuardianError

logger = logging.getLogger(__name__)

# Exit codes shared by all commands.
EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_NO_DEPENDENCIES = 2
EXIT_FAILURE = 3

SEVERITY_MAP: dict[str, Severity] = {
    "low": Severity.LOW,
    "medium": Severity.MEDIUM,
    "high": Severity.HIGH,
    "critical": Severity.CRITICAL,
}

config_option = click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Configuration file (default: <path>/chainguardian.yaml if present).",
)
data_option = click.option(
    "--data", "data_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Registry data file (trusted sources, malicious hashes, vulnerabilities).",
)


def fail(message: str) -> NoReturn:
    """Print an error to stderr and exit with ``EXIT_FAILURE``."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(EXIT_FAILURE)


def load_config(
    project: Path,
    config_path: str | None,
    **overrides: object,
) -> GuardianConfig:
    """Load the config file (explicit or discovered) and apply CLI overrides."""
    try:
        if config_path:
            config = GuardianConfig.from_file(Path(config_path))
        else:
            config = GuardianConfig.discover(project)
        return config.with_overrides(**overrides)
    except ChainGuardianError as exc:
        fail(str(exc))


def build_signer(config: GuardianConfig) -> SBOMSigner:
    key = config.signing_key()
    if key is None:
        fail(
            f"No SBOM signing key: set the {config.signing_key_env} "
            f"environment variable"
        )
    return SBOMSigner(HmacSigner(key, key_id=config.key_id))


def build_orchestrator(
    config: GuardianConfig, stream: AlertStream | None = None
) -> ScanOrchestrator:
    """Assemble a ``ScanOrchestrator`` from validated settings."""
    feeds = []
    if config.osv:
        from chainguardian.feeds.osv import OsvFeed

        feeds.append(OsvFeed(timeout=config.package_timeout or 10.0))
    if config.verification_key() is None:
        logger.info(
            "No package verification key in %s; signed packages will be "
            "reported as incompletely evaluated",
            config.verification_key_env,
        )
    try:
        store = config.snapshot_store()
    except ChainGuardianError as exc:
        fail(str(exc))
    return ScanOrchestrator(
        build_signer(config),
        store=store,
        verifier=DigestSignatureVerifier(config.verification_key()),
        feeds=feeds,
        options=config.scan_options(),
        stream=stream,
    )
