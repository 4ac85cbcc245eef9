"""Shared HTTP client utilities for remote vulnerability feeds.

Provides a thin wrapper around ``httpx.Client`` with standardised timeouts,
user-agent headers, and error handling. Feeds use this module so that HTTP
behaviour is consistent and testable.

Unlike best-effort registry browsing, a failed vulnerability lookup must not
look like "no vulnerabilities", so every transport failure raises
``EvaluationFailure`` instead of returning an empty result.
"""

from __future__ import annotations

import logging
from typing import Any

from chainguardian.exceptions import ConfigError, EvaluationFailure

logger = logging.getLogger(__name__)

# Timeout for all feed HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 10.0

# User-Agent sent with every request.
USER_AGENT: str = "ChainGuardian-Feed/0.1"


def _ensure_httpx() -> Any:  # noqa: ANN401
    """Lazily import httpx and raise a friendly error if missing.

    Raises:
        ConfigError: If httpx is not installed.
    """
    try:
        import httpx  # noqa: F811

        return httpx
    except ImportError:
        raise ConfigError(
            "httpx is required for remote vulnerability feeds.\n"
            "Install it with: pip install chainguardian[feeds]"
        ) from None


def post_json(
    url: str,
    payload: dict[str, Any],
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, Any]:
    """POST a JSON body and parse the JSON response.

    Args:
        url: Endpoint URL.
        payload: JSON-serialisable request body.
        timeout: Request timeout in seconds.

    Returns:
        The parsed response object. Non-object responses become ``{}``.

    Raises:
        EvaluationFailure: On timeouts, HTTP errors, or invalid JSON.
    """
    httpx = _ensure_httpx()
    try:
        with httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            resp = client.post(url, json=payload)
            resp.raise_for_status()
            data = resp.json()
    except httpx.TimeoutException as exc:
        logger.warning("Timeout posting to %s", url)
        raise EvaluationFailure(f"Timeout querying {url}") from exc
    except httpx.HTTPStatusError as exc:
        logger.warning("HTTP %d from %s", exc.response.status_code, url)
        raise EvaluationFailure(
            f"HTTP {exc.response.status_code} from {url}"
        ) from exc
    except (httpx.RequestError, ValueError) as exc:
        logger.warning("Request error for %s: %s", url, exc)
        raise EvaluationFailure(f"Request error for {url}: {exc}") from exc
    return data if isinstance(data, dict) else {}
