"""Configuration data models.

Defines dataclasses for credentials and for the optional YAML settings file.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

APP_DIR_NAME = "u64-remote"

DEFAULT_SERVICE_TYPE = "_http._tcp.local."


def default_config_dir() -> Path:
    """Per-user configuration directory ($XDG_CONFIG_HOME/u64-remote)."""
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def default_cache_path() -> Path:
    return default_config_dir() / "cache.json"


def default_settings_path() -> Path:
    return default_config_dir() / "config.yaml"


def normalize_address(address: str) -> str:
    """Prefix a bare host with http:// and drop any trailing slash."""
    address = address.strip()
    if not address:
        return ""
    if not address.startswith(("http://", "https://")):
        address = "http://" + address
    return address.rstrip("/")


@dataclass
class Credentials:
    """Device address and API password."""
    address: str = ""
    password: str = ""
    enable_message_box: bool = False

    def __post_init__(self):
        self.address = normalize_address(self.address)

    def with_address(self, address: str) -> "Credentials":
        """Copy of these credentials pointing at another device."""
        return replace(self, address=address)


@dataclass
class DiscoverySettings:
    """Tunables for device discovery."""
    mdns_timeout_ms: int = 800
    probe_timeout_ms: int = 250
    validate_timeout_ms: int = 1500
    max_hosts_per_interface: int = 512
    service_type: str = DEFAULT_SERVICE_TYPE
    cache_path: Optional[str] = None


@dataclass
class HttpSettings:
    """Tunables for requests sent to the device."""
    request_timeout: float = 5.0
    connect_timeout: float = 1.5
    max_retries: int = 2


@dataclass
class Settings:
    """Complete settings file."""
    discovery: DiscoverySettings = field(default_factory=DiscoverySettings)
    http: HttpSettings = field(default_factory=HttpSettings)
    source: Optional[str] = None


@dataclass
class ValidationError:
    """A single settings validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of settings validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    def __str__(self) -> str:
        if self.valid:
            return "Valid"
        details = "; ".join(f"{e.path}: {e.message}" for e in self.errors)
        return f"Invalid settings: {details}"
