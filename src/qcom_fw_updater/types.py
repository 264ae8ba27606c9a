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
# qcom-fw-updater/src/qcom_fw_updater/types.py

"""Type definitions for firmware extraction and synchronization."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal


Classification = Literal["unchanged", "new", "changed", "not-in-package"]


class Outcome(Enum):
    """Terminal status of a run, mapped to a process exit code."""
    APPLIED = 0
    PENDING = 2
    UP_TO_DATE = 3

    @property
    def exit_code(self) -> int:
        return self.value


@dataclass(frozen=True)
class StageResult:
    """Output directory produced by one extraction stage."""
    stage: str
    path: Path


@dataclass(frozen=True)
class StagedFile:
    """A manifest file copied out of the extracted package."""
    name: str
    path: Path
    size: int
    sha256: str


@dataclass(frozen=True)
class LocateResult:
    """Staging directory plus coverage of the manifest."""
    staging_dir: Path
    staged: dict[str, StagedFile]
    manifest_size: int

    @property
    def found(self) -> int:
        return len(self.staged)


@dataclass(frozen=True)
class DiffRecord:
    """Comparison of one manifest entry against the installed firmware."""
    name: str
    status: Classification
    size: int | None = None
    old_sha256: str | None = None
    new_sha256: str | None = None

    @property
    def needs_install(self) -> bool:
        return self.status in ("new", "changed")


@dataclass(frozen=True)
class DiffSummary:
    """Counts per classification."""
    changed: int = 0
    new: int = 0
    unchanged: int = 0
    not_in_package: int = 0

    @property
    def pending(self) -> int:
        return self.changed + self.new


@dataclass
class SyncReport:
    """Result of applying a set of diff records to an install target."""
    target: Path
    backup: Path | None = None
    installed: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    bytes_freed: int = 0
    rebuild_triggered: bool = False
    rebuild_failed: bool = False
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
