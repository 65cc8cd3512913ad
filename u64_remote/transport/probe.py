"""Connectivity probe against a device's version endpoint.

A probe never raises: transport failures (DNS, connect, timeout) are folded
into an unreachable ProbeResult.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

VERSION_PATH = "/v1/version"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single connectivity probe."""
    reachable: bool
    status_code: int = 0
    body: bytes = b""
    error: Optional[str] = None

    @property
    def is_device_response(self) -> bool:
        """Reachable and answered with a non-empty body."""
        return self.reachable and len(self.body) > 0


def probe_version(
    base_url: str,
    timeout_ms: int,
    session: Optional[requests.Session] = None,
) -> ProbeResult:
    """GET <base_url>/v1/version with a bounded timeout.

    Any status below 500 counts as reachable, so 401/403 from a
    password-protected device still proves a live host.

    Args:
        base_url: Device base URL, e.g. http://10.0.0.183.
        timeout_ms: Connect and read timeout in milliseconds.
        session: Optional requests session to reuse.

    Returns:
        ProbeResult describing the response.
    """
    url = base_url.rstrip("/") + VERSION_PATH
    timeout = timeout_ms / 1000.0
    getter = session.get if session is not None else requests.get

    try:
        response = getter(url, timeout=(timeout, timeout))
    except requests.RequestException as e:
        logger.debug("Probe %s failed: %s", url, e)
        return ProbeResult(reachable=False, error=str(e))

    status = response.status_code
    body = response.content or b""
    reachable = 0 < status < 500
    logger.debug("Probe %s -> HTTP %d (%d bytes)", url, status, len(body))

    return ProbeResult(reachable=reachable, status_code=status, body=body)
