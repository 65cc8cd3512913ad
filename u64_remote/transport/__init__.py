"""Transport module - HTTP communication."""

from .http_client import DeviceHttpClient, DeviceRequestError
from .probe import ProbeResult, probe_version
from .retry_policy import RetryPolicy, default_retry_policy

__all__ = [
    "DeviceHttpClient",
    "DeviceRequestError",
    "ProbeResult",
    "probe_version",
    "RetryPolicy",
    "default_retry_policy",
]
