# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# Copyright (C) 2026 HRDAG https://hrdag.org
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program; if not, see <https://www.gnu.org/licenses/>.
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/pipeline.py

"""End-to-end update run: extract, locate, compare, synchronize."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from .config import Settings
from .diff import compare_firmware, summarize
from .download import download
from .errors import InputNotFoundError, PreconditionError, PrivilegeError
from .extractor import ContainerExtractor, Toolset, input_kind
from .locator import locate_firmware
from .manifest import FIRMWARE_FILES, HIGH_IMPACT_FILES
from .sync import Synchronizer
from .tools import CommandTrigger, MsiExtract, SevenZip, check_tools
from .types import DiffRecord, DiffSummary, LocateResult, Outcome, SyncReport

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "qcom-fw-update."


@dataclass
class RunResult:
    """Everything a caller needs to report on a finished run."""
    target: Path
    located: LocateResult
    records: list[DiffRecord]
    summary: DiffSummary
    outcome: Outcome
    sync: SyncReport | None = None


def check_preconditions(package: Path | None, url: str | None,
                        settings: Settings) -> None:
    """Reject bad input before a workspace exists."""
    if package is None and url is None:
        raise PreconditionError("No input: give a package path or --url")
    if package is not None and url is not None:
        raise PreconditionError("Specify either --url or a file path, not both")
    if package is not None:
        if not package.is_file():
            raise InputNotFoundError(f"File not found: {package}")
        input_kind(package)
    if settings.apply and settings.require_root and os.geteuid() != 0:
        raise PrivilegeError(
            "Installing firmware needs root. Re-run with sudo, or use --dry-run."
        )


def default_toolset(settings: Settings) -> Toolset:
    check_tools()
    return Toolset(archive=SevenZip(), package=MsiExtract(),
                   block_size=settings.block_size)


def default_rebuild(settings: Settings) -> Callable[[], None] | None:
    if not settings.rebuild_command:
        return None
    return CommandTrigger(settings.rebuild_command)


def run_update(
    target: Path,
    settings: Settings,
    *,
    package: Path | None = None,
    url: str | None = None,
    tools: Toolset | None = None,
    rebuild: Callable[[], None] | None = None,
    on_diff: Callable[[list[DiffRecord], DiffSummary], None] | None = None,
    manifest: Sequence[str] = FIRMWARE_FILES,
    high_impact: frozenset[str] = HIGH_IMPACT_FILES,
) -> RunResult:
    """Run the whole pipeline against an already resolved ``target``.

    ``tools`` and ``rebuild`` default to the real 7-Zip/msiextract adapters
    and the initramfs command. ``on_diff`` is called with the comparison
    before anything is installed.
    """
    target = Path(target)
    check_preconditions(package, url, settings)
    if tools is None:
        tools = default_toolset(settings)
    if rebuild is None:
        rebuild = default_rebuild(settings)

    with tempfile.TemporaryDirectory(prefix=WORKSPACE_PREFIX) as tmp:
        workspace = Path(tmp)
        if url is not None:
            package = download(url, workspace / "download.zip",
                               show_progress=settings.show_progress)

        extract_root = ContainerExtractor(tools).extract(package, workspace)
        located = locate_firmware(extract_root, workspace / "firmware", manifest)

        records = compare_firmware(located.staging_dir, target, manifest)
        summary = summarize(records)
        if on_diff is not None:
            on_diff(records, summary)

        result = RunResult(target=target, located=located, records=records,
                           summary=summary, outcome=Outcome.UP_TO_DATE)
        if summary.pending == 0:
            logger.info("All firmware files are up to date, nothing to do")
            return result
        if not settings.apply:
            logger.info("Dry run, no changes made")
            result.outcome = Outcome.PENDING
            return result

        synchronizer = Synchronizer(target, mode=settings.mode,
                                    owner=settings.owner, rebuild=rebuild,
                                    high_impact=high_impact)
        result.sync = synchronizer.apply(located.staging_dir, records)
        result.outcome = Outcome.APPLIED
        return result
