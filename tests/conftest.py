"""Shared fixtures for u64-remote tests."""

from __future__ import annotations

import pytest

from u64_remote.discovery.models import DiscoveredDevice
from u64_remote.transport.probe import ProbeResult


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Keep the cache and settings files out of the real home directory."""
    config_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "u64-remote"


@pytest.fixture
def three_devices() -> list[DiscoveredDevice]:
    return [
        DiscoveredDevice(address="10.0.0.10", hostname="C64U-01.local", port=80),
        DiscoveredDevice(address="10.0.0.11", hostname="C64U-02.local", port=80),
        DiscoveredDevice(address="10.0.0.12", hostname="U64-Elite.local", port=8080),
    ]


def device_response(status_code: int = 200, body: bytes = b'{"version":"0.1"}') -> ProbeResult:
    """A probe result from a host that answered."""
    return ProbeResult(reachable=0 < status_code < 500, status_code=status_code, body=body)


def no_response() -> ProbeResult:
    return ProbeResult(reachable=False, error="timed out")
