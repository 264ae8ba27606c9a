# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/cli.py

"""Command line interface for qcom-fw-updater."""

import logging
import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Settings
from .devices import DEVICES, resolve_target
from .errors import FirmwareUpdateError
from .log import setup_logging
from .manifest import FIRMWARE_BASE, REBUILD_COMMAND
from .pipeline import run_update
from .report import print_diff, print_sync
from .types import Outcome

app = typer.Typer(help="Update Adreno GPU firmware from a Qualcomm Windows Graphics Driver package")
console = Console()
logger = logging.getLogger(__name__)


def _terminate(signum, frame):
    # unwind so the temporary workspace is removed
    raise SystemExit(128 + signum)


@app.command()
def update(
    package: Optional[Path] = typer.Argument(
        None, help="Local .zip or .exe driver package"),
    url: Optional[str] = typer.Option(
        None, "--url", help="Download the driver package from URL instead"),
    device_path: Optional[str] = typer.Option(
        None, "--device-path", envvar="QCOM_FW_DEVICE_PATH",
        help="Override the auto-detected firmware path (e.g. x1e80100/dell/xps13-9345)"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Compare only, don't install"),
    firmware_base: Path = typer.Option(
        FIRMWARE_BASE, "--firmware-base", envvar="QCOM_FW_BASE",
        help="Root of the qcom firmware tree"),
    no_rebuild: bool = typer.Option(
        False, "--no-rebuild", envvar="QCOM_FW_NO_REBUILD",
        help="Skip the initramfs rebuild after display firmware changes"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """Extract firmware from a driver package, compare it, and install it."""
    setup_logging(debug)
    signal.signal(signal.SIGTERM, _terminate)
    settings = Settings(
        firmware_base=firmware_base,
        device_path=device_path,
        apply=not dry_run,
        rebuild_command=() if no_rebuild else REBUILD_COMMAND,
    )

    try:
        target = resolve_target(settings.device_path, settings.firmware_base)
        logger.info("Firmware path: %s", target)
        result = run_update(
            target,
            settings,
            package=package,
            url=url,
            on_diff=lambda records, summary: print_diff(console, records, summary),
        )
    except FirmwareUpdateError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if result.sync is not None:
        print_sync(console, result.sync)
        if not result.sync.ok:
            raise typer.Exit(1)
    if result.outcome is Outcome.APPLIED:
        console.print("Done. Reboot to load updated firmware.")
    raise typer.Exit(result.outcome.exit_code)


@app.command()
def devices() -> None:
    """Show supported devices."""
    table = Table(title="Supported devices")
    table.add_column("SoC", style="cyan")
    table.add_column("OEM/Model", style="green")
    table.add_column("Firmware path", style="yellow")
    for device in DEVICES:
        table.add_row(device.soc, device.name, device.path)
    console.print(table)
    console.print("\nFor unlisted devices, use --device-path <soc/oem/board>.")


@app.command()
def version() -> None:
    """Show the version."""
    typer.echo(f"qcom-fw-updater {__version__}")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
