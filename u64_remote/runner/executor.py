"""Upload executor - orchestrates one program upload.

Coordinates the full flow:
1. Load credentials
2. Apply command-line overrides
3. Discover the device (when forced or no address is known)
4. Read the program image
5. Check connectivity (HTTP)
6. Upload and run the program (HTTP)
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import click
import requests

from ..config.parser import find_credentials
from ..config.schema import Credentials, Settings, normalize_address
from ..discovery.coordinator import (
    Chooser,
    DeviceSelectionError,
    DiscoveryCoordinator,
    NoDevicesFoundError,
)
from ..transport.http_client import DeviceHttpClient, DeviceRequestError
from ..transport.retry_policy import RetryPolicy


@dataclass
class ExecutionConfig:
    """Configuration for one upload run."""
    creds_path: Optional[str] = None
    address: Optional[str] = None
    password: Optional[str] = None
    force_discovery: bool = False
    settings: Settings = field(default_factory=Settings)


@dataclass
class ExecutionResult:
    """Complete result of an upload run."""
    program: str
    success: bool = False
    address: str = ""
    hostname: str = ""
    source: Optional[str] = None  # "credentials", "override", "cache", "multicast", "subnet"
    bytes_sent: int = 0
    duration_ms: int = 0
    error: Optional[str] = None


def read_program(path: str) -> bytes:
    """Read a program image from disk.

    Raises:
        RuntimeError: If the file can't be read.
    """
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise RuntimeError(f"Failed to open file: {path} ({e.strerror or e})") from e


class UploadExecutor:
    """Resolves the device address and uploads a program to it."""

    def __init__(
        self,
        config: Optional[ExecutionConfig] = None,
        coordinator: Optional[DiscoveryCoordinator] = None,
        chooser: Optional[Chooser] = None,
        echo: Callable[[str], None] = click.echo,
    ):
        """Initialize the executor.

        Args:
            config: Run configuration.
            coordinator: Discovery coordinator (built from settings if None).
            chooser: Picks a device when discovery finds several.
            echo: Sink for progress messages.
        """
        self.config = config or ExecutionConfig()
        self.coordinator = coordinator or DiscoveryCoordinator(self.config.settings.discovery)
        self.chooser = chooser
        self._echo = echo

    def execute(self, program_path: str) -> ExecutionResult:
        """Run the full upload flow.

        Returns:
            ExecutionResult; `error` is set when the run failed.
        """
        start_time = time.time()
        result = ExecutionResult(program=program_path)

        try:
            creds, source = self.resolve_credentials()
            result.address = creds.address
            result.source = source

            if not creds.password:
                click.echo(
                    "Warning: password is empty. If your C64U requires one, requests may fail.",
                    err=True,
                )

            program = read_program(program_path)

            http = self.config.settings.http
            with DeviceHttpClient(
                creds.address,
                password=creds.password,
                retry_policy=RetryPolicy(max_retries=http.max_retries),
                request_timeout=http.request_timeout,
                connect_timeout=http.connect_timeout,
            ) as client:
                client.get_version()
                self._echo(f"Uploading PRG ({len(program)} bytes) ...")
                client.run_prg(program)

            result.bytes_sent = len(program)
            result.success = True
            self._echo("Done.")

        except (NoDevicesFoundError, DeviceSelectionError, DeviceRequestError) as e:
            result.error = str(e)

        except (requests.ConnectionError, requests.Timeout, ConnectionError) as e:
            result.error = f"Connection failed: {e}"

        except (RuntimeError, ValueError) as e:
            result.error = str(e)

        except Exception as e:
            result.error = f"Unexpected error: {type(e).__name__}: {e}"

        finally:
            result.duration_ms = int((time.time() - start_time) * 1000)

        return result

    def resolve_credentials(self) -> tuple[Credentials, str]:
        """Credentials with overrides applied and a usable address.

        Returns:
            (credentials, where the address came from)
        """
        creds = find_credentials(self.config.creds_path)
        source = "credentials"

        if self.config.address:
            creds = creds.with_address(normalize_address(self.config.address))
            source = "override"
        if self.config.password:
            creds.password = self.config.password

        if self.config.force_discovery or not creds.address:
            self._echo("Discovering C64U on local network...")
            resolution = self.coordinator.resolve(
                chooser=self.chooser,
                use_cache=not self.config.force_discovery,
            )
            creds = creds.with_address(resolution.address)
            source = resolution.strategy
            self._echo(f"Using: {creds.address}")

        return creds, source
