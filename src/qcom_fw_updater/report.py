# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/report.py

"""Terminal rendering of comparison and install results."""

from rich.console import Console
from rich.table import Table

from .types import DiffRecord, DiffSummary, SyncReport

STATUS_LABELS = {
    "unchanged": ("SAME", ""),
    "new": ("NEW", "yellow"),
    "changed": ("CHANGED", "green"),
    "not-in-package": ("SKIP", "dim"),
}


def format_size(size: int) -> str:
    """Binary-prefixed size, like ``numfmt --to=iec-i --suffix=B``."""
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if unit == "B" and value < 1024:
            return f"{size}B"
        if value < 1024 or unit == "GiB":
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{size}B"


def diff_table(records: list[DiffRecord]) -> Table:
    table = Table(title="Firmware comparison")
    table.add_column("File", style="cyan")
    table.add_column("Status")
    table.add_column("Size (new)", justify="right")

    for record in records:
        label, style = STATUS_LABELS[record.status]
        size = "(not in package)" if record.size is None else format_size(record.size)
        table.add_row(record.name, f"[{style}]{label}[/{style}]" if style else label, size)
    return table


def summary_line(summary: DiffSummary) -> str:
    return (
        f"Summary: {summary.changed} changed, {summary.new} new, "
        f"{summary.unchanged} same, {summary.not_in_package} not in package"
    )


def print_diff(console: Console, records: list[DiffRecord], summary: DiffSummary) -> None:
    console.print(diff_table(records))
    console.print(f"\n[bold]{summary_line(summary)}[/bold]")


def print_sync(console: Console, report: SyncReport) -> None:
    """Print what an install run did, including per-file failures."""
    console.print(f"\n[bold]Installed {len(report.installed)} firmware file(s) "
                  f"into {report.target}[/bold]")
    if report.backup is not None:
        console.print(f"  Backup: {report.backup}")
    if report.removed:
        console.print(f"  Removed {len(report.removed)} Windows-only file(s), "
                      f"freed {format_size(report.bytes_freed)}")
    if report.rebuild_triggered:
        status = "[red]failed[/red]" if report.rebuild_failed else "done"
        console.print(f"  Initramfs rebuild: {status}")
    if report.failures:
        console.print(f"\n[red]{len(report.failures)} file operation(s) failed:[/red]")
        for name, reason in report.failures:
            console.print(f"  {name}: {reason}")
