"""Data models shared by the discovery strategies."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DiscoveredDevice:
    """A device found by multicast browsing or by a subnet probe."""
    address: str
    hostname: str = ""
    port: int = 0  # 0 = unknown

    @property
    def base_url(self) -> str:
        """HTTP base URL for the device's REST API."""
        if self.port and self.port != 80:
            return f"http://{self.address}:{self.port}"
        return f"http://{self.address}"

    def __str__(self) -> str:
        if self.hostname:
            return f"{self.hostname} at {self.base_url}"
        return self.base_url


@dataclass(frozen=True)
class CacheEntry:
    """Last-known-good device address, persisted between runs."""
    address: str  # full base URL, e.g. http://10.0.0.183
    hostname: str = ""

    @classmethod
    def from_device(cls, device: DiscoveredDevice) -> "CacheEntry":
        return cls(address=device.base_url, hostname=device.hostname)


@dataclass(frozen=True)
class Resolution:
    """Final outcome of a discovery run."""
    entry: CacheEntry
    strategy: str  # "cache", "multicast" or "subnet"

    @property
    def address(self) -> str:
        return self.entry.address

    @property
    def hostname(self) -> str:
        return self.entry.hostname
