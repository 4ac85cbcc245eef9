"""ChainGuardian configuration.

Settings live in a YAML file (``chainguardian.yaml`` by default) and can be
overridden per invocation by CLI options. Secrets are never stored in the
file itself: the file names the environment variables that hold them.

Example::

    max_workers: 16
    package_timeout: 20
    scan_deadline: 300
    first_match_only: false
    alert_buffer: 256
    data_file: risk-data.yaml
    signing_key_env: CHAINGUARDIAN_SIGNING_KEY
    key_id: ci-2026
    verification_key_env: CHAINGUARDIAN_VERIFY_KEY
    osv: false
    trusted_sources:
      - https://registry.npmjs.org
      - https://nexus.internal.example/

Relative ``data_file`` paths resolve against the config file's directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from chainguardian.core.orchestrator.models import ScanOptions
from chainguardian.core.registries.loader import load_snapshot
from chainguardian.core.registries.snapshot import RiskSnapshot, SnapshotStore
from chainguardian.core.registries.trust import TrustRegistry
from chainguardian.exceptions import ConfigError

DEFAULT_CONFIG_NAME = "chainguardian.yaml"
DEFAULT_SIGNING_KEY_ENV = "CHAINGUARDIAN_SIGNING_KEY"
DEFAULT_VERIFICATION_KEY_ENV = "CHAINGUARDIAN_VERIFY_KEY"


@dataclass(frozen=True)
class GuardianConfig:
    """Validated ChainGuardian settings.

    Attributes:
        max_workers: Parallel package evaluations.
        package_timeout: Per-package evaluation bound in seconds (``None``
            disables it).
        scan_deadline: Whole-scan bound in seconds (``None``
            disables it).
        first_match_only: Scan only the highest-priority ecosystem.
        alert_buffer: Capacity of the alert stream.
        data_file: Registry data file (trusted sources, malicious hashes,
            vulnerabilities). ``None`` uses built-in defaults only.
        signing_key_env: Environment variable holding the SBOM signing key.
        key_id: Key identifier recorded in signature entries.
        verification_key_env: Environment variable holding the package
            attestation key.
        osv: Also query the OSV database for vulnerabilities.
        trusted_sources: Trusted source prefixes. Replaces the data file's
            list when set.
    """

    max_workers: int = 8
    package_timeout: float | None = 30.0
    scan_deadline: float | None = None
    first_match_only: bool = False
    alert_buffer: int = 100
    data_file: Path | None = None
    signing_key_env: str = DEFAULT_SIGNING_KEY_ENV
    key_id: str = "default"
    verification_key_env: str = DEFAULT_VERIFICATION_KEY_ENV
    osv: bool = False
    trusted_sources: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.alert_buffer, int) or self.alert_buffer < 1:
            raise ConfigError(f"alert_buffer must be >= 1, got {self.alert_buffer}")
        try:
            self.scan_options()
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid scan settings: {exc}") from exc

    # -- Loading ------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> GuardianConfig:
        """Build a config from a parsed mapping; unknown keys are rejected."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        values = dict(data)
        if values.get("data_file"):
            data_file = Path(str(values["data_file"]))
            if base_dir is not None and not data_file.is_absolute():
                data_file = base_dir / data_file
            values["data_file"] = data_file
        sources = values.get("trusted_sources")
        if sources is not None:
            if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
                raise ConfigError("trusted_sources must be a list of strings")
            values["trusted_sources"] = tuple(sources)
        try:
            return cls(**values)
        except TypeError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_file(cls, path: Path) -> GuardianConfig:
        """Load a YAML configuration file.

        Raises:
            ConfigError: If the file cannot be read, parsed, or validated.
        """
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Cannot read config {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed config {path}: {exc}") from exc
        return cls.from_dict(raw or {}, base_dir=path.parent)

    @classmethod
    def discover(cls, project_path: Path) -> GuardianConfig:
        """Load ``chainguardian.yaml`` from the project if present, else defaults."""
        candidate = project_path / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            return cls.from_file(candidate)
        return cls()

    def with_overrides(self, **overrides: Any) -> GuardianConfig:
        """Copy with every non-``None`` override applied."""
        applied = {k: v for k, v in overrides.items() if v is not None}
        try:
            return replace(self, **applied)
        except TypeError as exc:
            raise ConfigError(f"Invalid override: {exc}") from exc

    # -- Derived settings ---------------------------------------------------

    def scan_options(self) -> ScanOptions:
        return ScanOptions(
            max_workers=self.max_workers,
            package_timeout=self.package_timeout,
            scan_deadline=self.scan_deadline,
            first_match_only=self.first_match_only,
        )

    def signing_key(self) -> bytes | None:
        value = os.environ.get(self.signing_key_env, "")
        return value.encode("utf-8") if value else None

    def verification_key(self) -> bytes | None:
        value = os.environ.get(self.verification_key_env, "")
        return value.encode("utf-8") if value else None

    def load_snapshot(self) -> RiskSnapshot:
        """Build the risk snapshot from ``data_file`` and ``trusted_sources``."""
        snapshot = load_snapshot(self.data_file) if self.data_file else RiskSnapshot()
        if self.trusted_sources is not None:
            snapshot = replace(snapshot, trust=TrustRegistry(self.trusted_sources))
        return snapshot

    def snapshot_store(self) -> SnapshotStore:
        return SnapshotStore(self.load_snapshot())
