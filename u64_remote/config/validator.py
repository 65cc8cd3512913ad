"""Settings validator for u64-remote.

Validates parsed Settings objects against the limits discovery relies on.
"""

from .schema import (
    Settings,
    ValidationError,
    ValidationResult,
)

# Scanning more than a /16 worth of hosts per interface is never useful
MAX_HOSTS_PER_INTERFACE_LIMIT = 65534


def validate_settings(settings: Settings) -> ValidationResult:
    """Validate a parsed Settings object.

    Checks:
    - Discovery timeouts, host cap and service type
    - HTTP timeouts and retry count

    Args:
        settings: Parsed Settings to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    _validate_discovery(settings, errors, warnings)
    _validate_http(settings, errors, warnings)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_discovery(
    settings: Settings,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate discovery settings."""
    discovery = settings.discovery

    for name in ("mdns_timeout_ms", "probe_timeout_ms", "validate_timeout_ms"):
        value = getattr(discovery, name)
        if not _is_number(value) or value <= 0:
            errors.append(ValidationError(
                path=f"discovery.{name}",
                message=f"'{name}' must be a positive number of milliseconds, got {value!r}.",
            ))

    cap = discovery.max_hosts_per_interface
    if not isinstance(cap, int) or isinstance(cap, bool) or cap <= 0:
        errors.append(ValidationError(
            path="discovery.max_hosts_per_interface",
            message=f"'max_hosts_per_interface' must be a positive integer, got {cap!r}.",
        ))
    elif cap > MAX_HOSTS_PER_INTERFACE_LIMIT:
        errors.append(ValidationError(
            path="discovery.max_hosts_per_interface",
            message=f"'max_hosts_per_interface' must not exceed {MAX_HOSTS_PER_INTERFACE_LIMIT}, got {cap}.",
        ))
    elif _is_number(discovery.probe_timeout_ms) and cap * discovery.probe_timeout_ms > 10 * 60 * 1000:
        warnings.append(ValidationError(
            path="discovery.max_hosts_per_interface",
            message=(
                f"A full subnet scan may take up to {cap * discovery.probe_timeout_ms // 1000}s "
                "per interface."
            ),
            severity="warning",
        ))

    service_type = discovery.service_type
    if not isinstance(service_type, str) or not service_type.endswith(".local."):
        errors.append(ValidationError(
            path="discovery.service_type",
            message=f"Invalid service type {service_type!r}. Expected e.g. '_http._tcp.local.'.",
        ))

    if discovery.cache_path is not None and not isinstance(discovery.cache_path, str):
        errors.append(ValidationError(
            path="discovery.cache_path",
            message="'cache_path' must be a string.",
        ))


def _validate_http(
    settings: Settings,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate HTTP settings."""
    http = settings.http

    for name in ("request_timeout", "connect_timeout"):
        value = getattr(http, name)
        if not _is_number(value) or value <= 0:
            errors.append(ValidationError(
                path=f"http.{name}",
                message=f"'{name}' must be a positive number of seconds, got {value!r}.",
            ))

    if not isinstance(http.max_retries, int) or isinstance(http.max_retries, bool) or http.max_retries < 0:
        errors.append(ValidationError(
            path="http.max_retries",
            message=f"'max_retries' must be a non-negative integer, got {http.max_retries!r}.",
        ))
    elif http.max_retries > 5:
        warnings.append(ValidationError(
            path="http.max_retries",
            message="More than 5 retries makes an unreachable device very slow to report.",
            severity="warning",
        ))


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
