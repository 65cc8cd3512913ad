"""Config module - credentials and YAML settings."""

from .schema import (
    Credentials,
    DiscoverySettings,
    HttpSettings,
    Settings,
    ValidationError,
    ValidationResult,
    default_cache_path,
    default_config_dir,
    default_settings_path,
    normalize_address,
)
from .parser import (
    find_credentials,
    load_credentials,
    load_settings,
    parse_credentials_data,
    parse_settings_data,
)
from .validator import validate_settings

__all__ = [
    "Credentials",
    "DiscoverySettings",
    "HttpSettings",
    "Settings",
    "ValidationError",
    "ValidationResult",
    "default_cache_path",
    "default_config_dir",
    "default_settings_path",
    "normalize_address",
    "find_credentials",
    "load_credentials",
    "load_settings",
    "parse_credentials_data",
    "parse_settings_data",
    "validate_settings",
]
