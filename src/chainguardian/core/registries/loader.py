"""Build a ``RiskSnapshot`` from a YAML or JSON data file.

Expected document shape::

    trusted_sources:
      - https://registry.npmjs.org
    malicious_hashes:
      abc123: "Typosquat of left-pad exfiltrating env vars"
    vulnerabilities:
      - name: lodash
        version: 4.17.20
        id: CVE-2021-23337
        cvss: 7.2
        description: Command injection via template
        fixed_in: 4.17.21
        discovered_at: 2021-02-15T00:00:00Z

Missing sections fall back to defaults (default trusted sources, empty
registries). Any structural problem raises ``ConfigError``.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from chainguardian.core.inventory.models import Vulnerability
from chainguardian.core.registries.malicious import MaliciousHashRegistry
from chainguardian.core.registries.snapshot import RiskSnapshot
from chainguardian.core.registries.trust import DEFAULT_TRUSTED_SOURCES, TrustRegistry
from chainguardian.core.registries.vulnerabilities import VulnerabilityIndex
from chainguardian.exceptions import ConfigError


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ConfigError(f"Invalid discovered_at timestamp: {value!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _parse_vulnerability(entry: Any, position: int) -> tuple[str, str, Vulnerability]:
    if not isinstance(entry, dict):
        raise ConfigError(f"vulnerabilities[{position}] must be a mapping")
    missing = [k for k in ("name", "version", "id", "cvss") if k not in entry]
    if missing:
        raise ConfigError(
            f"vulnerabilities[{position}] is missing {', '.join(missing)}"
        )
    try:
        vuln = Vulnerability(
            id=str(entry["id"]),
            cvss=float(entry["cvss"]),
            description=str(entry.get("description", "")),
            fixed_in=str(entry.get("fixed_in") or ""),
            discovered_at=_parse_timestamp(entry.get("discovered_at")),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"vulnerabilities[{position}]: {exc}") from exc
    return str(entry["name"]), str(entry["version"]), vuln


def snapshot_from_dict(data: dict[str, Any]) -> RiskSnapshot:
    """Build a snapshot from an already-parsed data document."""
    if not isinstance(data, dict):
        raise ConfigError("Registry data must be a mapping at the top level")

    sources = data.get("trusted_sources", list(DEFAULT_TRUSTED_SOURCES))
    if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
        raise ConfigError("trusted_sources must be a list of strings")

    hashes = data.get("malicious_hashes", {}) or {}
    if not isinstance(hashes, dict):
        raise ConfigError("malicious_hashes must be a mapping of hash to reason")

    raw_vulns = data.get("vulnerabilities", []) or []
    if not isinstance(raw_vulns, list):
        raise ConfigError("vulnerabilities must be a list")
    records = [_parse_vulnerability(e, i) for i, e in enumerate(raw_vulns)]

    return RiskSnapshot(
        trust=TrustRegistry(sources),
        vulnerabilities=VulnerabilityIndex.from_records(records),
        malicious=MaliciousHashRegistry({str(k): str(v) for k, v in hashes.items()}),
    )


def load_snapshot(path: Path) -> RiskSnapshot:
    """Read a registry data file (``.json``, ``.yaml`` or ``.yml``).

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read registry data {path}: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Malformed registry data {path}: {exc}") from exc
    return snapshot_from_dict(data or {})
