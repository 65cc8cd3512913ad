"""Multicast DNS discovery for devices advertising an HTTP service.

Browses `_http._tcp.local.` for a fixed time budget. Browse events are handed
to a resolver thread through a queue; every successful resolution becomes one
DiscoveredDevice on a result queue. The caller sleeps for the whole budget,
stops the session and drains whatever resolved in the meantime.

Discovery is best-effort: if zeroconf cannot start (no multicast-capable
interface, permission denied, ...) the result is simply empty.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from zeroconf import Error as ZeroconfError
from zeroconf import IPVersion, ServiceBrowser, Zeroconf

from ..config.schema import DEFAULT_SERVICE_TYPE
from .models import DiscoveredDevice

logger = logging.getLogger(__name__)

# How often the resolver thread checks for the stop signal, in seconds
POLL_INTERVAL = 0.05

# Upper bound for a single service resolution, in milliseconds
MAX_RESOLVE_TIMEOUT_MS = 1000


class _BrowseListener:
    """Queues every newly advertised service for resolution."""

    def __init__(self, pending: "queue.Queue[tuple[str, str]]"):
        self._pending = pending

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        logger.debug("Advertisement: %s", name)
        self._pending.put((type_, name))

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        pass

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        pass


@dataclass
class MulticastSession:
    """Handle for one running browse, returned by start() and consumed by stop()."""
    zeroconf: Zeroconf
    browser: ServiceBrowser
    worker: threading.Thread
    stop_event: threading.Event
    results: "queue.Queue[DiscoveredDevice]"


class MulticastDiscovery:
    """Finds devices via mDNS service browsing."""

    def __init__(
        self,
        service_type: str = DEFAULT_SERVICE_TYPE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize multicast discovery.

        Args:
            service_type: Fully qualified service type to browse.
            sleep: Sleep function used while waiting out the budget.
        """
        self.service_type = service_type
        self._sleep = sleep

    def discover(self, timeout_ms: int) -> list[DiscoveredDevice]:
        """Browse for the full time budget and return resolved devices.

        Results keep the order in which resolutions completed and may contain
        duplicates.

        Args:
            timeout_ms: Time budget in milliseconds.

        Returns:
            Discovered devices; empty if mDNS is unavailable.
        """
        session = self.start(resolve_timeout_ms=min(timeout_ms, MAX_RESOLVE_TIMEOUT_MS))
        if session is None:
            return []

        try:
            self._sleep(timeout_ms / 1000.0)
        finally:
            devices = self.stop(session)

        logger.info("mDNS discovery found %d device(s)", len(devices))
        return devices

    def start(self, resolve_timeout_ms: int = MAX_RESOLVE_TIMEOUT_MS) -> Optional[MulticastSession]:
        """Start browsing.

        Returns:
            A running session, or None if zeroconf could not be initialized.
        """
        try:
            zc = Zeroconf()
        except (OSError, ZeroconfError) as e:
            logger.warning("mDNS unavailable: %s", e)
            return None

        pending: "queue.Queue[tuple[str, str]]" = queue.Queue()
        results: "queue.Queue[DiscoveredDevice]" = queue.Queue()
        stop_event = threading.Event()

        try:
            browser = ServiceBrowser(zc, self.service_type, _BrowseListener(pending))
        except (OSError, ZeroconfError) as e:
            logger.warning("Failed to browse for %s: %s", self.service_type, e)
            zc.close()
            return None

        worker = threading.Thread(
            target=self._resolve_loop,
            args=(zc, pending, results, stop_event, resolve_timeout_ms),
            name="mdns-resolver",
            daemon=True,
        )
        worker.start()
        logger.debug("Browsing for %s", self.service_type)

        return MulticastSession(
            zeroconf=zc,
            browser=browser,
            worker=worker,
            stop_event=stop_event,
            results=results,
        )

    def stop(self, session: MulticastSession) -> list[DiscoveredDevice]:
        """Stop a session, release its resources and collect its results."""
        session.stop_event.set()
        try:
            session.worker.join()
            session.browser.cancel()
        finally:
            session.zeroconf.close()

        devices: list[DiscoveredDevice] = []
        while True:
            try:
                devices.append(session.results.get_nowait())
            except queue.Empty:
                break
        return devices

    def _resolve_loop(
        self,
        zc: Zeroconf,
        pending: "queue.Queue[tuple[str, str]]",
        results: "queue.Queue[DiscoveredDevice]",
        stop_event: threading.Event,
        resolve_timeout_ms: int,
    ) -> None:
        """Resolver thread: turn queued advertisements into devices until stopped."""
        while not stop_event.is_set():
            try:
                type_, name = pending.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue

            device = self._resolve(zc, type_, name, resolve_timeout_ms)

            # A resolution that finishes after the stop signal is dropped
            if device is not None and not stop_event.is_set():
                results.put(device)

    def _resolve(
        self,
        zc: Zeroconf,
        type_: str,
        name: str,
        timeout_ms: int,
    ) -> Optional[DiscoveredDevice]:
        """Resolve one advertisement to an IPv4 address."""
        try:
            info = zc.get_service_info(type_, name, timeout=timeout_ms)
        except (OSError, ZeroconfError) as e:
            logger.debug("Failed to resolve %s: %s", name, e)
            return None

        if info is None:
            logger.debug("No answer resolving %s", name)
            return None

        addresses = info.parsed_addresses(IPVersion.V4Only)
        if not addresses:
            logger.debug("%s has no IPv4 address", name)
            return None

        device = DiscoveredDevice(
            address=str(addresses[0]),
            hostname=(info.server or "").rstrip("."),
            port=info.port or 0,
        )
        logger.debug("Resolved %s -> %s", name, device)
        return device
