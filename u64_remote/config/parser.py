"""Credentials and settings file parsers.

Credentials are a flat, hand-authored JSON object:
{
    "address": "10.0.0.183",
    "password": "secret",
    "enableMessageBox": false
}

Settings are an optional YAML file:
discovery:
  mdns_timeout_ms: 800
  probe_timeout_ms: 250
  max_hosts_per_interface: 512
http:
  request_timeout: 5.0
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

import yaml

from .schema import (
    Credentials,
    DiscoverySettings,
    HttpSettings,
    Settings,
    default_settings_path,
)

logger = logging.getLogger(__name__)

# Searched in order when no credentials file is given explicitly
CREDENTIALS_SEARCH_PATHS = (
    Path("creds.json"),
    Path("..") / "json_examples" / "creds.json",
    Path("json_examples") / "creds.json",
)


def load_credentials(file_path: Union[str, Path]) -> Credentials:
    """Parse a credentials JSON file.

    Missing fields fall back to empty values; a bare host address is
    upgraded to an http:// URL.

    Args:
        file_path: Path to the credentials file.

    Returns:
        Parsed Credentials.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not a JSON object.
    """
    file_path = Path(file_path)

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed credentials file {file_path}: {e}") from e

    return parse_credentials_data(data, source=str(file_path))


def parse_credentials_data(data: dict, source: str = "<inline>") -> Credentials:
    """Build Credentials from an already decoded JSON object."""
    if not isinstance(data, dict):
        raise ValueError(f"Credentials must be a JSON object, got {type(data).__name__} ({source})")

    address = data.get("address")
    password = data.get("password")
    enable_message_box = data.get("enableMessageBox")

    return Credentials(
        address=address if isinstance(address, str) else "",
        password=password if isinstance(password, str) else "",
        enable_message_box=enable_message_box if isinstance(enable_message_box, bool) else False,
    )


def find_credentials(explicit_path: Optional[Union[str, Path]] = None) -> Credentials:
    """Load credentials from an explicit path or the default search paths.

    Args:
        explicit_path: File given on the command line. Loading it must succeed.

    Returns:
        Loaded Credentials, or empty Credentials if no default file was usable.

    Raises:
        RuntimeError: If the explicit file could not be loaded.
    """
    if explicit_path:
        try:
            return load_credentials(explicit_path)
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Failed to load creds from: {explicit_path} ({e})") from e

    for candidate in CREDENTIALS_SEARCH_PATHS:
        try:
            creds = load_credentials(candidate)
        except (OSError, ValueError) as e:
            logger.debug("Skipping credentials candidate %s: %s", candidate, e)
            continue
        logger.info("Loaded credentials from %s", candidate)
        return creds

    logger.debug("No credentials file found; relying on overrides and discovery")
    return Credentials()


def load_settings(file_path: Optional[Union[str, Path]] = None) -> Settings:
    """Parse the YAML settings file.

    Args:
        file_path: Settings file. None = default location, which may be absent.

    Returns:
        Parsed Settings (defaults if the default file doesn't exist).

    Raises:
        FileNotFoundError: If an explicit settings file doesn't exist.
        ValueError: If the YAML is malformed or has the wrong shape.
    """
    if file_path is None:
        file_path = default_settings_path()
        if not file_path.exists():
            return Settings()

    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Settings file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed settings file {file_path}: {e}") from e

    if data is None:
        return Settings(source=str(file_path))

    return parse_settings_data(data, source=str(file_path))


def parse_settings_data(data: dict, source: str = "<inline>") -> Settings:
    """Parse settings from a dictionary (already loaded YAML).

    Unknown keys are ignored.

    Raises:
        ValueError: If a section is not a mapping.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Settings must be a YAML mapping, got {type(data).__name__}")

    discovery_data = _section(data, "discovery", source)
    http_data = _section(data, "http", source)

    discovery = DiscoverySettings(**{
        k: v for k, v in discovery_data.items()
        if k in DiscoverySettings.__dataclass_fields__
    })
    http = HttpSettings(**{
        k: v for k, v in http_data.items()
        if k in HttpSettings.__dataclass_fields__
    })

    return Settings(discovery=discovery, http=http, source=source)


def _section(data: dict, name: str, source: str) -> dict:
    """Return a settings section, checking that it is a mapping."""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' must be a mapping in {source}")
    return section
