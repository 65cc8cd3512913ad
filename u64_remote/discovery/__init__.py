"""Discovery module - cache, mDNS and subnet scan."""

from .address_cache import AddressCache
from .coordinator import (
    DeviceSelectionError,
    DiscoveryCoordinator,
    NoDevicesFoundError,
)
from .mdns_browser import MulticastDiscovery, MulticastSession
from .models import CacheEntry, DiscoveredDevice, Resolution
from .subnet_scanner import InterfaceAddress, SubnetScanner, enumerate_hosts

__all__ = [
    "AddressCache",
    "DeviceSelectionError",
    "DiscoveryCoordinator",
    "NoDevicesFoundError",
    "MulticastDiscovery",
    "MulticastSession",
    "CacheEntry",
    "DiscoveredDevice",
    "Resolution",
    "InterfaceAddress",
    "SubnetScanner",
    "enumerate_hosts",
]
