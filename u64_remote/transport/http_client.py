"""HTTP client for the device's REST API.

Implements the requests used by the upload tool:
- GET /v1/version            - Connectivity check
- POST /v1/runners:run_prg   - Upload and run a program image
"""

import logging
import time
from typing import Optional

import requests

from .probe import VERSION_PATH
from .retry_policy import RetryPolicy, default_retry_policy

logger = logging.getLogger(__name__)

RUN_PRG_PATH = "/v1/runners:run_prg"
OCTET_STREAM = "application/octet-stream"


class DeviceRequestError(RuntimeError):
    """The device answered with an unexpected HTTP status."""

    def __init__(self, operation: str, status_code: int, body: bytes):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        text = body.decode("utf-8", errors="replace")
        super().__init__(f"{operation} failed HTTP {status_code} body: {text}")


class DeviceHttpClient:
    """HTTP client for a single device.

    Every request carries the X-Password header, empty when the device has
    no password configured.
    """

    def __init__(
        self,
        base_url: str,
        password: str = "",
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 5.0,
        connect_timeout: float = 1.5,
    ):
        """Initialize HTTP client.

        Args:
            base_url: Base URL of the device (e.g., http://10.0.0.183).
            password: API password sent as X-Password.
            retry_policy: Retry policy for failed GET requests.
            request_timeout: Read timeout in seconds.
            connect_timeout: Connect timeout in seconds.

        Raises:
            ValueError: If no base URL is given.
        """
        if not base_url:
            raise ValueError("No address set. Provide address in creds or use discovery.")

        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_timeout = request_timeout
        self.connect_timeout = connect_timeout
        self._session = requests.Session()
        self._session.headers.update({"X-Password": password})

    def build_url(self, path: str) -> str:
        """Join a request path onto the base URL."""
        if path and not path.startswith("/"):
            path = "/" + path
        return self.base_url + path

    def get_version(self) -> bytes:
        """Connectivity check.

        GET /v1/version

        Some firmwares answer 401/403 when a password is required; that still
        means the host is reachable, so only a missing status is an error.

        Returns:
            Raw response body.

        Raises:
            ConnectionError: If the device is unreachable.
        """
        response = self._request_with_retry("GET", self.build_url(VERSION_PATH))
        if not response.status_code:
            raise ConnectionError(f"No HTTP response code from {VERSION_PATH}")
        return response.content

    def run_prg(self, program: bytes) -> None:
        """Upload a program image and start it.

        POST /v1/runners:run_prg

        Args:
            program: Raw .prg bytes (load address included).

        Raises:
            DeviceRequestError: If the device does not answer 2xx.
        """
        logger.debug("Uploading %d bytes to %s", len(program), self.base_url)
        response = self._session.post(
            self.build_url(RUN_PRG_PATH),
            data=program,
            headers={"Content-Type": OCTET_STREAM},
            timeout=(self.connect_timeout, self.request_timeout),
        )
        if not 200 <= response.status_code < 300:
            raise DeviceRequestError("runPRG", response.status_code, response.content)

    def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> requests.Response:
        """Execute an idempotent HTTP request with retry logic.

        Connection errors, timeouts and 5xx responses are retried; the last
        5xx response is returned to the caller once retries run out.

        Raises:
            requests.ConnectionError: After all retries exhausted.
            requests.Timeout: After all retries exhausted.
        """
        kwargs.setdefault("timeout", (self.connect_timeout, self.request_timeout))

        for attempt in range(self.retry_policy.max_retries + 1):
            last_attempt = attempt >= self.retry_policy.max_retries
            try:
                response = self._session.request(method, url, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                if last_attempt:
                    raise
                logger.debug("%s %s failed (%s), retrying", method, url, e)
            else:
                if response.status_code < 500 or last_attempt:
                    return response
                logger.debug("%s %s -> HTTP %d, retrying", method, url, response.status_code)

            time.sleep(self.retry_policy.get_delay(attempt))

        raise RuntimeError("Request failed with no response captured")

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
