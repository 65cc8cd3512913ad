"""Discovery coordinator - resolves one device address.

Strategies are tried in order and the first non-empty one wins:
1. Cached address, if it still answers a connectivity probe
2. mDNS browsing
3. Subnet scan (only when mDNS found nothing)

Results of different strategies are never merged.
"""

import logging
from typing import Callable, Optional

from ..config.schema import DiscoverySettings
from ..transport.probe import ProbeResult, probe_version
from .address_cache import AddressCache
from .mdns_browser import MulticastDiscovery
from .models import CacheEntry, DiscoveredDevice, Resolution
from .subnet_scanner import SubnetScanner

logger = logging.getLogger(__name__)

# Receives the ordered device list, returns the ordinal index of the choice
Chooser = Callable[[list[DiscoveredDevice]], int]


class NoDevicesFoundError(RuntimeError):
    """Every discovery strategy came back empty."""


class DeviceSelectionError(RuntimeError):
    """No valid device was chosen among several candidates."""


class DiscoveryCoordinator:
    """Runs the discovery strategies and picks a single device."""

    def __init__(
        self,
        settings: Optional[DiscoverySettings] = None,
        cache: Optional[AddressCache] = None,
        multicast: Optional[MulticastDiscovery] = None,
        scanner: Optional[SubnetScanner] = None,
        probe: Callable[[str, int], ProbeResult] = probe_version,
    ):
        """Initialize the coordinator.

        Args:
            settings: Discovery tunables. Default: DiscoverySettings().
            cache: Address cache. Default: cache at the settings' path.
            multicast: mDNS discovery strategy.
            scanner: Subnet scan strategy.
            probe: Probe used to validate a cached address.
        """
        self.settings = settings or DiscoverySettings()
        self.cache = cache or AddressCache(self.settings.cache_path)
        self.multicast = multicast or MulticastDiscovery(self.settings.service_type)
        self.scanner = scanner or SubnetScanner(probe=probe)
        self._probe = probe
        self.last_strategy: Optional[str] = None

    def resolve(
        self,
        chooser: Optional[Chooser] = None,
        use_cache: bool = True,
    ) -> Resolution:
        """Find the device to talk to.

        Args:
            chooser: Called with the device list when several devices are found.
            use_cache: Try the cached address first.

        Returns:
            Resolution with the selected address and the strategy that found it.

        Raises:
            NoDevicesFoundError: If no strategy found a device.
            DeviceSelectionError: If several devices were found and none was
                validly chosen.
        """
        if use_cache:
            entry = self.validated_cache_entry()
            if entry is not None:
                self.last_strategy = "cache"
                return Resolution(entry=entry, strategy="cache")

        devices = self.discover()
        return self.select(devices, self.last_strategy, chooser)

    def list_devices(self) -> list[DiscoveredDevice]:
        """Run discovery without the cache, without selecting or caching.

        Raises:
            NoDevicesFoundError: If no strategy found a device.
        """
        return self.discover()

    def validated_cache_entry(self) -> Optional[CacheEntry]:
        """The cached entry if it still answers a connectivity probe."""
        entry = self.cache.read()
        if entry is None:
            return None

        result = self._probe(entry.address, self.settings.validate_timeout_ms)
        if not result.reachable:
            logger.info("Cached address %s did not respond", entry.address)
            return None

        logger.info("Using cached address %s", entry.address)
        return entry

    def discover(self) -> list[DiscoveredDevice]:
        """mDNS first, subnet scan only if mDNS found nothing.

        Raises:
            NoDevicesFoundError: If both strategies came back empty.
        """
        devices = self.multicast.discover(self.settings.mdns_timeout_ms)
        if devices:
            self.last_strategy = "multicast"
            return devices

        logger.info("No mDNS advertisements, falling back to subnet scan")
        devices = self.scanner.discover(
            self.settings.probe_timeout_ms,
            self.settings.max_hosts_per_interface,
        )
        if devices:
            self.last_strategy = "subnet"
            return devices

        self.last_strategy = None
        raise NoDevicesFoundError(
            "No C64U devices discovered. Provide --address or set address in creds.json."
        )

    def select(
        self,
        devices: list[DiscoveredDevice],
        strategy: str,
        chooser: Optional[Chooser] = None,
    ) -> Resolution:
        """Pick one device and remember it in the cache.

        A single device is selected automatically; otherwise the chooser
        decides by ordinal index.

        Args:
            devices: Candidates in discovery order.
            strategy: Strategy that produced the candidates.
            chooser: Called with the devices when there are several.

        Raises:
            NoDevicesFoundError: If the list is empty.
            DeviceSelectionError: If no chooser was given for several devices
                or it returned an index out of range.
        """
        if not devices:
            raise NoDevicesFoundError("No devices to select from.")

        if len(devices) == 1:
            index = 0
        elif chooser is None:
            raise DeviceSelectionError(
                f"{len(devices)} devices found; a selection is required."
            )
        else:
            index = chooser(devices)

        if not isinstance(index, int) or not 0 <= index < len(devices):
            raise DeviceSelectionError(
                f"Invalid selection {index!r}; expected 0..{len(devices) - 1}."
            )

        device = devices[index]
        entry = CacheEntry.from_device(device)
        self.cache.write(entry)

        logger.info("Selected %s via %s", device, strategy)
        return Resolution(entry=entry, strategy=strategy)
