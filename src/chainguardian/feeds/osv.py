"""OSV (https://osv.dev) backed vulnerability feed.

Queries ``POST /v1/query`` for one package version at a time and converts
each OSV record into a ``Vulnerability``. Results are cached per
``(ecosystem, name, version)`` for the lifetime of the feed, so one feed
instance should be created per scan.

OSV severity entries usually carry CVSS *vectors* rather than scores. A
numeric score is used when present; otherwise the GitHub advisory
``database_specific.severity`` rating is mapped to the lower bound of its
CVSS band.

Usage::

    feed = ChainedFeed(snapshot.vulnerabilities, OsvFeed())
    evaluator = RiskEvaluator(snapshot, feed=feed)
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

from chainguardian.core.inventory.models import Vulnerability
from chainguardian.feeds import http_client

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

OSV_QUERY_URL: str = "https://api.osv.dev/v1/query"

# Scanner ecosystem identifiers -> OSV ecosystem names.
ECOSYSTEM_MAP: dict[str, str] = {
    "npm": "npm",
    "python": "PyPI",
    "pypi": "PyPI",
    "maven": "Maven",
}

_RATING_SCORES: dict[str, float] = {
    "CRITICAL": 9.0,
    "HIGH": 7.0,
    "MODERATE": 4.0,
    "MEDIUM": 4.0,
    "LOW": 0.1,
}


# ---------------------------------------------------------------------------
# OSV Feed
# ---------------------------------------------------------------------------


class OsvFeed:
    """Remote vulnerability feed backed by the OSV query API.

    Args:
        default_ecosystem: OSV ecosystem used when a lookup carries no
            ecosystem hint. Lookups without any ecosystem return nothing.
        timeout: Per-request timeout in seconds.
        url: Query endpoint (override for mirrors and tests).
    """

    def __init__(
        self,
        default_ecosystem: str = "",
        *,
        timeout: float = http_client.DEFAULT_TIMEOUT,
        url: str = OSV_QUERY_URL,
    ) -> None:
        self._default_ecosystem = default_ecosystem
        self._timeout = timeout
        self._url = url
        self._cache: dict[tuple[str, str, str], tuple[Vulnerability, ...]] = {}
        self._lock = threading.Lock()

    def lookup(
        self, name: str, version: str, ecosystem: str = ""
    ) -> tuple[Vulnerability, ...]:
        osv_ecosystem = _osv_ecosystem(ecosystem) or self._default_ecosystem
        if not osv_ecosystem:
            logger.debug("No OSV ecosystem for %s@%s; skipping", name, version)
            return ()
        key = (osv_ecosystem, name, version)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        payload = {
            "package": {"name": name, "ecosystem": osv_ecosystem},
            "version": version,
        }
        data = http_client.post_json(self._url, payload, timeout=self._timeout)
        vulns = tuple(
            v for v in (_osv_record_to_vulnerability(r) for r in data.get("vulns", []))
            if v is not None
        )
        with self._lock:
            self._cache[key] = vulns
        return vulns


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _osv_ecosystem(ecosystem: str) -> str:
    if not ecosystem:
        return ""
    return ECOSYSTEM_MAP.get(ecosystem.lower(), ecosystem)


def _osv_score(record: dict[str, Any]) -> float:
    """Best-effort numeric CVSS score for an OSV record."""
    for entry in record.get("severity", []) or []:
        if not isinstance(entry, dict):
            continue
        try:
            score = float(entry.get("score", ""))
        except (TypeError, ValueError):
            continue
        if 0.0 <= score <= 10.0:
            return score
    db = record.get("database_specific", {})
    rating = str(db.get("severity", "")).upper() if isinstance(db, dict) else ""
    return _RATING_SCORES.get(rating, 0.0)


def _osv_fixed_in(record: dict[str, Any]) -> str:
    """First ``fixed`` event across the record's affected ranges."""
    for affected in record.get("affected", []) or []:
        if not isinstance(affected, dict):
            continue
        for rng in affected.get("ranges", []) or []:
            for event in rng.get("events", []) if isinstance(rng, dict) else []:
                if isinstance(event, dict) and event.get("fixed"):
                    return str(event["fixed"])
    return ""


def _osv_published(record: dict[str, Any]) -> datetime | None:
    raw = record.get("published")
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _osv_record_to_vulnerability(record: Any) -> Vulnerability | None:
    """Convert one OSV ``vulns[]`` entry to a Vulnerability."""
    if not isinstance(record, dict) or not record.get("id"):
        return None
    description = str(record.get("summary") or record.get("details") or "")[:500]
    return Vulnerability(
        id=str(record["id"]),
        cvss=_osv_score(record),
        description=description,
        fixed_in=_osv_fixed_in(record),
        discovered_at=_osv_published(record),
    )
