"""Brute-force subnet scan, the fallback when mDNS finds nothing.

Every local IPv4 interface contributes the lowest `max_hosts_per_interface`
usable addresses of its subnet. Each candidate gets one version probe; the
scan is sequential, so the worst case is roughly
sum(min(usable_hosts, cap)) * per_host_timeout.
"""

import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import Callable, Iterable

import psutil

from ..transport.probe import ProbeResult, probe_version
from .models import DiscoveredDevice

logger = logging.getLogger(__name__)

LOOPBACK_NETWORK = ipaddress.IPv4Network("127.0.0.0/8")


@dataclass(frozen=True)
class InterfaceAddress:
    """An IPv4 address assigned to a local interface."""
    interface: str
    address: str
    netmask: str


def local_ipv4_interfaces() -> list[InterfaceAddress]:
    """List IPv4 addresses with a netmask, in OS enumeration order."""
    found = []
    for name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family != socket.AF_INET or not addr.address or not addr.netmask:
                continue
            found.append(InterfaceAddress(name, addr.address, addr.netmask))
    return found


def enumerate_hosts(address: str, netmask: str, cap: int) -> list[str]:
    """Usable host addresses of an interface's subnet, ascending, at most `cap`.

    The network and broadcast addresses are excluded, so /31 and /32
    interfaces yield nothing. Loopback interfaces yield nothing.
    """
    try:
        ip = ipaddress.IPv4Address(address)
        network = ipaddress.IPv4Network(f"{address}/{netmask}", strict=False)
    except ValueError as e:
        logger.debug("Skipping %s/%s: %s", address, netmask, e)
        return []

    if ip in LOOPBACK_NETWORK or cap <= 0:
        return []

    first = int(network.network_address) + 1
    last = min(int(network.broadcast_address) - 1, first + cap - 1)

    hosts = (ipaddress.IPv4Address(h) for h in range(first, last + 1))
    return [str(h) for h in hosts if h not in LOOPBACK_NETWORK]


class SubnetScanner:
    """Probes every candidate host on the local subnets."""

    def __init__(
        self,
        probe: Callable[[str, int], ProbeResult] = probe_version,
        interfaces: Callable[[], Iterable[InterfaceAddress]] = local_ipv4_interfaces,
    ):
        """Initialize the scanner.

        Args:
            probe: Probe function taking (base_url, timeout_ms).
            interfaces: Provider of local IPv4 interface addresses.
        """
        self._probe = probe
        self._interfaces = interfaces

    def candidates(self, max_hosts_per_interface: int) -> list[str]:
        """All addresses a scan would probe, in probe order."""
        hosts: list[str] = []
        for iface in self._interfaces():
            iface_hosts = enumerate_hosts(iface.address, iface.netmask, max_hosts_per_interface)
            logger.debug(
                "Interface %s (%s/%s): %d candidate(s)",
                iface.interface, iface.address, iface.netmask, len(iface_hosts),
            )
            hosts.extend(iface_hosts)
        return hosts

    def discover(
        self,
        per_host_timeout_ms: int,
        max_hosts_per_interface: int,
    ) -> list[DiscoveredDevice]:
        """Probe each candidate and collect the hosts that answer like a device.

        A hit needs a completed request, a status in (0, 500) and a non-empty
        body. Hostnames are not discoverable this way and stay empty.

        Args:
            per_host_timeout_ms: Probe timeout for a single host.
            max_hosts_per_interface: Cap on probed hosts per interface.

        Returns:
            Responding devices in probe order.
        """
        devices: list[DiscoveredDevice] = []
        hosts = self.candidates(max_hosts_per_interface)
        logger.info("Scanning %d host(s) on local subnets", len(hosts))

        for host in hosts:
            result = self._probe(f"http://{host}", per_host_timeout_ms)
            if not result.is_device_response:
                continue
            device = DiscoveredDevice(address=host)
            logger.info("Device answered at %s (HTTP %d)", host, result.status_code)
            devices.append(device)

        return devices
