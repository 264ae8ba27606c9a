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
# qcom-fw-updater/src/qcom_fw_updater/__init__.py

"""Adreno GPU firmware extraction and updater for Snapdragon X machines."""

__version__ = "1.0.0"

from .diff import compare_firmware, has_changes, summarize
from .extractor import ContainerExtractor, Toolset, carve_tail
from .locator import locate_firmware
from .pipeline import RunResult, run_update
from .sync import Synchronizer
from .types import DiffRecord, LocateResult, Outcome, StagedFile, SyncReport

__all__ = [
    "ContainerExtractor",
    "Toolset",
    "carve_tail",
    "locate_firmware",
    "compare_firmware",
    "has_changes",
    "summarize",
    "Synchronizer",
    "run_update",
    "RunResult",
    "DiffRecord",
    "LocateResult",
    "Outcome",
    "StagedFile",
    "SyncReport",
]
