# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/locator.py

"""Find manifest firmware files in an extracted package."""

import logging
import os
import shutil
from pathlib import Path
from typing import Sequence

from .diff import sha256_file
from .errors import NoFirmwareFound
from .manifest import FIRMWARE_FILES
from .types import LocateResult, StagedFile

logger = logging.getLogger(__name__)


def index_tree(root: Path, wanted: Sequence[str]) -> dict[str, list[Path]]:
    """Map each wanted name (lowercased) to every matching file under root.

    Traversal is depth-first with sorted directory and file names, so the
    first path in each list is the same on every run.
    """
    lookup = {name.lower() for name in wanted}
    matches: dict[str, list[Path]] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            key = name.lower()
            if key not in lookup:
                continue
            path = Path(dirpath) / name
            if path.is_file() and not path.is_symlink():
                matches.setdefault(key, []).append(path)
    return matches


def locate_firmware(extract_root: Path | str, staging_dir: Path | str,
                    manifest: Sequence[str] = FIRMWARE_FILES) -> LocateResult:
    """Copy every manifest file found under ``extract_root`` into ``staging_dir``.

    Files are renamed to the manifest spelling and flattened. Finding none
    at all raises ``NoFirmwareFound``; partial coverage only warns.
    """
    extract_root = Path(extract_root)
    staging_dir = Path(staging_dir)
    staging_dir.mkdir(parents=True, exist_ok=True)

    matches = index_tree(extract_root, manifest)
    staged: dict[str, StagedFile] = {}
    for name in manifest:
        paths = matches.get(name.lower())
        if not paths:
            logger.debug("not in package: %s", name)
            continue
        if len(paths) > 1:
            logger.debug("%s matched %d times, using %s", name, len(paths), paths[0])

        dest = staging_dir / name
        shutil.copyfile(paths[0], dest)
        staged[name] = StagedFile(
            name=name,
            path=dest.resolve(),
            size=dest.stat().st_size,
            sha256=sha256_file(dest),
        )

    if not staged:
        raise NoFirmwareFound(
            "No firmware files found in extracted package. Extraction may have "
            "failed or this is not a Qualcomm Graphics Driver package."
        )

    result = LocateResult(staging_dir=staging_dir, staged=staged,
                          manifest_size=len(manifest))
    if result.found < result.manifest_size:
        logger.warning("Found %d/%d firmware files", result.found, result.manifest_size)
    else:
        logger.info("Found %d/%d firmware files", result.found, result.manifest_size)
    return result
