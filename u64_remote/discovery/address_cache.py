"""Persisted last-known-good device address.

The cache is a flat JSON object at a fixed per-user path:
{
    "address": "http://10.0.0.183",
    "hostname": "C64U-01.local"
}

A missing, unreadable or malformed file is treated as "no cache". Writes are
best-effort and last-writer-wins; nothing is locked.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from ..config.schema import default_cache_path
from .models import CacheEntry

logger = logging.getLogger(__name__)


class AddressCache:
    """Reads and writes the single cached CacheEntry."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize the cache.

        Args:
            path: Cache file location. Default: <config dir>/u64-remote/cache.json.
        """
        self.path = Path(path).expanduser() if path else default_cache_path()

    def read(self) -> Optional[CacheEntry]:
        """Load the cached entry.

        Returns:
            The CacheEntry, or None if there is no usable cache.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.debug("No address cache at %s", self.path)
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug("Ignoring unreadable address cache %s: %s", self.path, e)
            return None

        if not isinstance(data, dict):
            return None

        address = data.get("address")
        if not isinstance(address, str) or not address:
            logger.debug("Address cache %s has no address", self.path)
            return None

        hostname = data.get("hostname")
        if not isinstance(hostname, str):
            hostname = ""

        return CacheEntry(address=address, hostname=hostname)

    def write(self, entry: CacheEntry) -> None:
        """Overwrite the cache with a new entry."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(
                    {"address": entry.address, "hostname": entry.hostname},
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
        except OSError as e:
            logger.warning("Failed to write address cache %s: %s", self.path, e)
            return

        logger.debug("Cached %s (%s) in %s", entry.address, entry.hostname, self.path)
