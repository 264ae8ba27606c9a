# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/manifest.py

"""Fixed firmware manifest and install constants.

These never change at run time. The manifest is the complete set of files
the updater will stage, compare or install; everything else in a driver
package is ignored.
"""

from pathlib import Path
from typing import Final


# Firmware files Linux actually loads from the Graphics Driver package.
# Order is the display and install order.
FIRMWARE_FILES: Final = (
    "qcav1e8380.mbn",
    "qcdxkmbase8380.bin",
    "qcdxkmbase8380_68.bin",
    "qcdxkmbase8380_110.bin",
    "qcdxkmbase8380_150.bin",
    "qcdxkmbase8380_pa.bin",
    "qcdxkmbase8380_pa_67.bin",
    "qcdxkmbase8380_pa_111.bin",
    "qcdxkmbase8380_pa_140.bin",
    "qcdxkmsuc8380.mbn",
    "qcdxkmsucpurwa.mbn",
    "qcvss8380.mbn",
    "qcvss8380_pa.mbn",
    "sequence_manifest.bin",
    "unified_kbcs_32.bin",
    "unified_kbcs_64.bin",
    "unified_ksqs.bin",
)

# Display (KMS) firmware is loaded from the initramfs, so changing it
# requires a rebuild.
HIGH_IMPACT_FILES: Final = frozenset({
    "qcdxkmsuc8380.mbn",
    "qcdxkmsucpurwa.mbn",
})

# Windows-only driver artifacts that do not belong in a Linux firmware dir.
IRRELEVANT_EXTENSIONS: Final = frozenset({
    "dll", "sys", "exe", "cat", "inf", "json", "so", "txt",
})

FIRMWARE_BASE: Final = Path("/lib/firmware/qcom")

CARVE_BLOCK_SIZE: Final = 65536
BOOTSTRAPPER_SEARCH_DEPTH: Final = 3

INSTALL_MODE: Final = 0o644
INSTALL_OWNER: Final = (0, 0)

BACKUP_TIMESTAMP_FORMAT: Final = "%Y%m%d-%H%M%S"

REBUILD_COMMAND: Final = ("update-initramfs", "-u", "-k", "{kernel}")
