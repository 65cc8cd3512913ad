"""Tests for u64_remote.discovery.coordinator."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import device_response, no_response
from u64_remote.config.schema import DiscoverySettings
from u64_remote.discovery.address_cache import AddressCache
from u64_remote.discovery.coordinator import (
    DeviceSelectionError,
    DiscoveryCoordinator,
    NoDevicesFoundError,
)
from u64_remote.discovery.models import CacheEntry, DiscoveredDevice


@pytest.fixture
def cache(tmp_path):
    return AddressCache(tmp_path / "cache.json")


def _coordinator(cache, mdns=(), subnet=(), probe_result=None):
    multicast = MagicMock()
    multicast.discover.return_value = list(mdns)
    scanner = MagicMock()
    scanner.discover.return_value = list(subnet)
    probe = MagicMock(return_value=probe_result or no_response())

    coordinator = DiscoveryCoordinator(
        settings=DiscoverySettings(mdns_timeout_ms=300, probe_timeout_ms=100, max_hosts_per_interface=64),
        cache=cache,
        multicast=multicast,
        scanner=scanner,
        probe=probe,
    )
    return coordinator, multicast, scanner, probe


# ---------------------------------------------------------------------------
# Cache strategy
# ---------------------------------------------------------------------------


class TestCacheHit:
    def test_valid_cache_short_circuits(self, cache):
        cache.write(CacheEntry(address="http://10.0.0.5", hostname="C64U-01.local"))
        coordinator, multicast, scanner, probe = _coordinator(cache, probe_result=device_response())

        resolution = coordinator.resolve()

        assert resolution.strategy == "cache"
        assert resolution.address == "http://10.0.0.5"
        assert resolution.hostname == "C64U-01.local"
        probe.assert_called_once_with("http://10.0.0.5", 1500)
        multicast.discover.assert_not_called()
        scanner.discover.assert_not_called()

    def test_password_protected_cache_is_still_valid(self, cache):
        cache.write(CacheEntry(address="http://10.0.0.5"))
        coordinator, multicast, _, _ = _coordinator(cache, probe_result=device_response(status_code=401, body=b""))

        assert coordinator.resolve().strategy == "cache"
        multicast.discover.assert_not_called()

    def test_stale_cache_falls_back_to_multicast(self, cache):
        cache.write(CacheEntry(address="http://10.0.0.5"))
        device = DiscoveredDevice(address="10.0.0.77", hostname="C64U-01.local", port=80)
        coordinator, multicast, scanner, _ = _coordinator(cache, mdns=[device])
        chooser = MagicMock()

        resolution = coordinator.resolve(chooser=chooser)

        assert resolution.strategy == "multicast"
        assert resolution.address == "http://10.0.0.77"
        chooser.assert_not_called()
        scanner.discover.assert_not_called()
        assert cache.read() == CacheEntry(address="http://10.0.0.77", hostname="C64U-01.local")

    def test_use_cache_false_skips_cache(self, cache):
        cache.write(CacheEntry(address="http://10.0.0.5"))
        device = DiscoveredDevice(address="10.0.0.77")
        coordinator, _, _, probe = _coordinator(cache, mdns=[device], probe_result=device_response())

        resolution = coordinator.resolve(use_cache=False)

        assert resolution.address == "http://10.0.0.77"
        probe.assert_not_called()


# ---------------------------------------------------------------------------
# Fallback order
# ---------------------------------------------------------------------------


class TestFallback:
    def test_subnet_scan_only_when_multicast_empty(self, cache):
        device = DiscoveredDevice(address="192.168.1.64")
        coordinator, multicast, scanner, _ = _coordinator(cache, subnet=[device])

        resolution = coordinator.resolve()

        multicast.discover.assert_called_once_with(300)
        scanner.discover.assert_called_once_with(100, 64)
        assert resolution.strategy == "subnet"
        assert resolution.address == "http://192.168.1.64"
        assert cache.read() == CacheEntry(address="http://192.168.1.64", hostname="")

    def test_multicast_hits_are_not_merged_with_scan(self, cache, three_devices):
        coordinator, _, scanner, _ = _coordinator(cache, mdns=three_devices[:1], subnet=three_devices[1:])
        coordinator.resolve()
        scanner.discover.assert_not_called()

    def test_exhaustion_raises_and_writes_nothing(self, cache):
        coordinator, _, _, _ = _coordinator(cache)

        with pytest.raises(NoDevicesFoundError, match="No C64U devices discovered"):
            coordinator.resolve()

        assert not cache.path.exists()

    def test_exhaustion_is_distinct_from_selection_error(self):
        assert not issubclass(NoDevicesFoundError, DeviceSelectionError)
        assert not issubclass(DeviceSelectionError, NoDevicesFoundError)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelection:
    def test_manual_index_selects_in_returned_order(self, cache, three_devices):
        coordinator, _, _, _ = _coordinator(cache, mdns=three_devices)
        chooser = MagicMock(return_value=1)

        resolution = coordinator.resolve(chooser=chooser)

        chooser.assert_called_once_with(three_devices)
        assert resolution.address == "http://10.0.0.11"
        assert cache.read() == CacheEntry(address="http://10.0.0.11", hostname="C64U-02.local")

    def test_selected_port_is_kept_in_base_url(self, cache, three_devices):
        coordinator, _, _, _ = _coordinator(cache, mdns=three_devices)
        resolution = coordinator.resolve(chooser=lambda devices: 2)
        assert resolution.address == "http://10.0.0.12:8080"

    @pytest.mark.parametrize("index", [-1, 3, 99])
    def test_out_of_range_index(self, cache, three_devices, index):
        coordinator, _, _, _ = _coordinator(cache, mdns=three_devices)

        with pytest.raises(DeviceSelectionError):
            coordinator.resolve(chooser=lambda devices: index)

        assert cache.read() is None

    def test_several_devices_without_chooser(self, cache, three_devices):
        coordinator, _, _, _ = _coordinator(cache, mdns=three_devices)
        with pytest.raises(DeviceSelectionError, match="3 devices found"):
            coordinator.resolve()

    def test_select_reports_given_strategy(self, cache, three_devices):
        coordinator, _, _, _ = _coordinator(cache)

        resolution = coordinator.select(three_devices[1:2], "subnet")

        assert resolution.strategy == "subnet"
        assert resolution.address == "http://10.0.0.11"
        assert coordinator.last_strategy is None


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestListDevices:
    def test_lists_without_cache_or_selection(self, cache, three_devices):
        cache.write(CacheEntry(address="http://10.0.0.5"))
        coordinator, _, _, probe = _coordinator(cache, mdns=three_devices, probe_result=device_response())

        devices = coordinator.list_devices()

        assert devices == three_devices
        assert coordinator.last_strategy == "multicast"
        probe.assert_not_called()
        assert cache.read() == CacheEntry(address="http://10.0.0.5")

    def test_listing_with_nothing_found(self, cache):
        coordinator, _, _, _ = _coordinator(cache)
        with pytest.raises(NoDevicesFoundError):
            coordinator.list_devices()
