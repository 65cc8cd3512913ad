"""CLI entry point for u64-remote.

Usage:
    u64-remote [options] program.prg
    python -m u64_remote.cli --list
"""

import logging
import sys
from typing import Optional

import click

from . import __version__
from .config.parser import load_settings
from .config.schema import Settings
from .config.validator import validate_settings
from .discovery.coordinator import DiscoveryCoordinator, NoDevicesFoundError
from .discovery.models import DiscoveredDevice
from .reporting.json_reporter import JsonReporter
from .runner.executor import ExecutionConfig, UploadExecutor

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


class UploadCommand(click.Command):
    """Command whose option errors exit 1; only a missing PROGRAM exits 2."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            raise click.ClickException(e.format_message()) from e


@click.command(cls=UploadCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="u64-remote")
@click.argument("program", required=False)
@click.option("--creds", "creds_path", help="Credentials JSON file.")
@click.option("--address", help="Device address or base URL (overrides creds).")
@click.option("--password", help="API password (overrides creds).")
@click.option("--discover", is_flag=True, help="Discover the device even if an address is known.")
@click.option("--list", "list_only", is_flag=True, help="List devices on the network and exit.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML settings file.")
@click.option("--json", "json_output", is_flag=True, help="Print the result as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(
    program: Optional[str],
    creds_path: Optional[str],
    address: Optional[str],
    password: Optional[str],
    discover: bool,
    list_only: bool,
    config_path: Optional[str],
    json_output: bool,
    verbose: bool,
) -> None:
    """Upload and run a PRG on a C64U / Ultimate 64 on the local network."""
    setup_logging(verbose)

    if not list_only and not program:
        raise click.UsageError("Missing argument 'PROGRAM'.")

    try:
        settings = _load_settings(config_path)
    except (OSError, ValueError) as e:
        _fail(str(e), json_output, command="list" if list_only else "upload")
        return

    if list_only:
        _list_devices(settings, json_output)
        return

    # Keep stdout clean for the JSON document
    echo = (lambda msg: click.echo(msg, err=True)) if json_output else click.echo

    config = ExecutionConfig(
        creds_path=creds_path,
        address=address,
        password=password,
        force_discovery=discover,
        settings=settings,
    )
    executor = UploadExecutor(config=config, chooser=prompt_pick_index, echo=echo)
    result = executor.execute(program)

    if json_output:
        output = JsonReporter().generate_upload_output(result)
        click.echo(JsonReporter().to_json_string(output))
    elif result.error:
        click.echo(f"Error: {result.error}", err=True)

    if not result.success:
        sys.exit(1)


def setup_logging(verbose: bool) -> None:
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def prompt_pick_index(devices: list[DiscoveredDevice]) -> int:
    """Ask the user to pick one of several devices.

    Returns:
        The chosen index, or -1 if the prompt was aborted.
    """
    click.echo("Multiple C64U-like devices found:", err=True)
    for i, device in enumerate(devices):
        click.echo(f"  [{i}] {device}", err=True)

    try:
        return click.prompt("Pick index", type=int, err=True)
    except click.Abort:
        return -1


def _load_settings(config_path: Optional[str]) -> Settings:
    """Load and validate the settings file.

    Raises:
        ValueError: If the settings are invalid.
    """
    settings = load_settings(config_path)
    validation = validate_settings(settings)

    for warning in validation.warnings:
        logger.warning("%s: %s", warning.path, warning.message)

    if not validation.valid:
        raise ValueError(str(validation))

    return settings


def _list_devices(settings: Settings, json_output: bool) -> None:
    """Print every discoverable device without selecting or caching."""
    coordinator = DiscoveryCoordinator(settings.discovery)
    reporter = JsonReporter()

    if not json_output:
        click.echo("Discovering C64U on local network...")

    try:
        devices = coordinator.list_devices()
    except NoDevicesFoundError as e:
        _fail(str(e), json_output, command="list")
        return

    if json_output:
        output = reporter.generate_listing_output(devices, strategy=coordinator.last_strategy)
        click.echo(reporter.to_json_string(output))
        return

    for i, device in enumerate(devices):
        click.echo(f"  [{i}] {device}")


def _fail(message: str, json_output: bool, command: str) -> None:
    """Report a fatal error and exit with status 1."""
    if json_output:
        reporter = JsonReporter()
        output = reporter.generate_error_output(command, message)
        click.echo(reporter.to_json_string(output))
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(1)


if __name__ == "__main__":
    main()
