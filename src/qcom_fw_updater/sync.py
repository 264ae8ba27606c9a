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
# qcom-fw-updater/src/qcom_fw_updater/sync.py

"""Apply diff records to an installed firmware directory."""

import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from .errors import FirmwareUpdateError, SyncError
from .manifest import (
    BACKUP_TIMESTAMP_FORMAT,
    HIGH_IMPACT_FILES,
    INSTALL_MODE,
    INSTALL_OWNER,
    IRRELEVANT_EXTENSIONS,
)
from .report import format_size
from .types import DiffRecord, SyncReport

logger = logging.getLogger(__name__)


def backup_path(target: Path, when: datetime) -> Path:
    """Sibling of ``target`` named ``<target>.bak-<timestamp>``."""
    return target.with_name(f"{target.name}.bak-{when.strftime(BACKUP_TIMESTAMP_FORMAT)}")


def atomic_copy(src: Path, dest: Path, mode: int,
                owner: tuple[int, int] | None = None) -> None:
    """Copy ``src`` to ``dest`` so ``dest`` is never seen half written.

    The data lands in a temporary file in the destination directory, gets
    its final mode and owner, then is renamed over ``dest``.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", dir=dest.parent)
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        shutil.copyfile(src, tmp)
        os.chmod(tmp, mode)
        if owner is not None:
            os.chown(tmp, *owner)
        os.replace(tmp, dest)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class Synchronizer:
    """Install new and changed firmware into one target directory."""

    def __init__(
        self,
        target: Path | str,
        *,
        mode: int = INSTALL_MODE,
        owner: tuple[int, int] | None = INSTALL_OWNER,
        rebuild: Callable[[], None] | None = None,
        high_impact: frozenset[str] = HIGH_IMPACT_FILES,
        irrelevant_extensions: frozenset[str] = IRRELEVANT_EXTENSIONS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.target = Path(target)
        self.mode = mode
        self.owner = owner
        self.rebuild = rebuild
        self.high_impact = high_impact
        self.irrelevant_extensions = irrelevant_extensions
        self.clock = clock

    def ensure_target(self) -> None:
        try:
            self.target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SyncError(f"Cannot create firmware directory {self.target}: {e}") from e

    def backup(self) -> Path:
        """Copy the whole target directory before anything is written."""
        dest = backup_path(self.target, self.clock())
        logger.info("Backing up current firmware to %s", dest)
        try:
            shutil.copytree(self.target, dest, symlinks=True)
        except (OSError, shutil.Error) as e:
            raise SyncError(f"Backup of {self.target} failed: {e}") from e
        return dest

    def install(self, staging_dir: Path, records: Iterable[DiffRecord],
                report: SyncReport) -> None:
        for record in records:
            if not record.needs_install:
                continue
            dest = self.target / record.name
            try:
                atomic_copy(staging_dir / record.name, dest, self.mode, self.owner)
            except OSError as e:
                logger.error("Failed to install %s: %s", record.name, e)
                report.failures.append((record.name, str(e)))
                continue
            report.installed.append(record.name)
        logger.info("Installed %d firmware file(s)", len(report.installed))

    def remove_irrelevant(self, report: SyncReport) -> None:
        """Delete Windows-only files sitting directly in the target."""
        for path in sorted(self.target.iterdir()):
            if path.is_symlink() or not path.is_file():
                continue
            if path.suffix.lstrip(".") not in self.irrelevant_extensions:
                continue
            try:
                size = path.stat().st_size
                path.unlink()
            except OSError as e:
                logger.error("Failed to remove %s: %s", path.name, e)
                report.failures.append((path.name, str(e)))
                continue
            report.removed.append(path.name)
            report.bytes_freed += size

        if report.removed:
            logger.info("Cleaned up %d Windows-only file(s), freed %s",
                        len(report.removed), format_size(report.bytes_freed))

    def trigger_rebuild(self, report: SyncReport) -> None:
        """Run the rebuild hook once if any high-impact file was installed."""
        if not self.high_impact.intersection(report.installed):
            return
        if self.rebuild is None:
            logger.warning("Display firmware changed; rebuild your initramfs before rebooting")
            return

        logger.info("Display firmware changed, updating initramfs...")
        report.rebuild_triggered = True
        try:
            self.rebuild()
        except (FirmwareUpdateError, OSError) as e:
            report.rebuild_failed = True
            logger.warning("Initramfs update failed: %s", e)
            return
        logger.info("Initramfs updated")

    def apply(self, staging_dir: Path | str, records: list[DiffRecord]) -> SyncReport:
        """Backup, install, clean up, then rebuild if needed."""
        staging_dir = Path(staging_dir)
        report = SyncReport(target=self.target)

        self.ensure_target()
        report.backup = self.backup()
        self.install(staging_dir, records, report)
        self.remove_irrelevant(report)
        self.trigger_rebuild(report)
        return report
