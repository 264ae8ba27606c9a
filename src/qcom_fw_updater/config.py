# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/config.py

"""Run settings assembled by the CLI."""

from dataclasses import dataclass
from pathlib import Path

from .manifest import (
    CARVE_BLOCK_SIZE,
    FIRMWARE_BASE,
    INSTALL_MODE,
    INSTALL_OWNER,
    REBUILD_COMMAND,
)


@dataclass(frozen=True)
class Settings:
    """Knobs for one updater run.

    ``apply`` False is a dry run: stop after the comparison and touch
    nothing. ``owner`` None leaves file ownership as the copying user.
    An empty ``rebuild_command`` disables the initramfs rebuild.
    """
    firmware_base: Path = FIRMWARE_BASE
    device_path: str | None = None
    apply: bool = False
    block_size: int = CARVE_BLOCK_SIZE
    mode: int = INSTALL_MODE
    owner: tuple[int, int] | None = INSTALL_OWNER
    rebuild_command: tuple[str, ...] = REBUILD_COMMAND
    require_root: bool = True
    show_progress: bool = True
