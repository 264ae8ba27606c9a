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
# qcom-fw-updater/src/qcom_fw_updater/extractor.py

"""Nested container extraction for Qualcomm driver packages.

A driver package is four unrelated formats stacked on each other:

    ZIP -> WiX Burn bootstrapper EXE -> attached CAB -> MSI

7-Zip can open the bootstrapper, but it only surfaces the UX payloads
(manifest XML, DLLs, icons). The MSI lives in a cabinet appended after the
PE image, which 7-Zip reports only as ``Tail Size``. That tail is carved out
by byte offset and opened on its own; the MSI inside it is unpacked with
msiextract, since 7-Zip would show internal stream ids instead of file names.

Each stage takes one path and returns one path, writing only into its own
directory under the extraction root.
"""

import logging
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Final

from .errors import (
    ExtractionError,
    NoAppendedContainer,
    NoBootstrapperFound,
    NoInstallerPackage,
    PackageExtractionFailed,
    ToolError,
    UnsupportedInputError,
)
from .manifest import BOOTSTRAPPER_SEARCH_DEPTH, CARVE_BLOCK_SIZE
from .tools import ArchiveTool, PackageTool
from .types import StageResult

logger = logging.getLogger(__name__)

ZIP_SUFFIXES: Final = (".zip",)
EXE_SUFFIXES: Final = (".exe",)


@dataclass(frozen=True)
class Toolset:
    """External capabilities the extraction stages depend on."""
    archive: ArchiveTool
    package: PackageTool
    block_size: int = CARVE_BLOCK_SIZE


Stage = Callable[[Path, Path, Toolset], Path]


def input_kind(path: Path) -> str:
    """Classify a package path as ``zip`` or ``exe`` by suffix."""
    suffix = path.suffix.lower()
    if suffix in ZIP_SUFFIXES:
        return "zip"
    if suffix in EXE_SUFFIXES:
        return "exe"
    raise UnsupportedInputError(
        f"Unsupported file type: {path} (expected .zip or .exe)"
    )


def _stage_dir(root: Path, name: str) -> Path:
    out = root / name
    out.mkdir(parents=True, exist_ok=False)
    return out


def find_bootstrapper(root: Path, max_depth: int = BOOTSTRAPPER_SEARCH_DEPTH) -> Path | None:
    """First ``.exe`` under root, at most ``max_depth`` levels deep.

    Directories and files are visited in sorted order so the choice is
    stable across runs.
    """
    root_depth = len(root.parts)
    for dirpath, dirnames, filenames in os.walk(root):
        depth = len(Path(dirpath).parts) - root_depth + 1
        dirnames.sort()
        if depth >= max_depth:
            dirnames[:] = []
        for name in sorted(filenames):
            candidate = Path(dirpath) / name
            if name.lower().endswith(EXE_SUFFIXES) and candidate.is_file():
                return candidate
    return None


def carve_tail(source: Path, dest: Path, length: int,
               block_size: int = CARVE_BLOCK_SIZE) -> int:
    """Copy the last ``length`` bytes of ``source`` into ``dest``.

    Reads in ``block_size`` chunks starting at the block containing the
    offset, dropping the leading remainder of that first block, so the
    source is never held in memory. Returns the number of bytes written.
    """
    total = source.stat().st_size
    if length <= 0 or length > total:
        raise ValueError(f"Tail length {length} out of range for {total}-byte file")
    offset = total - length
    skip_blocks, remainder = divmod(offset, block_size)

    written = 0
    with source.open("rb") as src, dest.open("wb") as out:
        src.seek(skip_blocks * block_size)
        if remainder:
            first = src.read(block_size)[remainder:]
            out.write(first)
            written += len(first)
        while True:
            block = src.read(block_size)
            if not block:
                break
            out.write(block)
            written += len(block)
    return written


def unwrap_outer(source: Path, root: Path, tools: Toolset) -> Path:
    """ZIP -> bootstrapper EXE. An EXE input passes straight through."""
    if input_kind(source) == "exe":
        return source

    logger.info("Extracting ZIP archive...")
    out = _stage_dir(root, "zip")
    try:
        with zipfile.ZipFile(source) as archive:
            archive.extractall(out)
    except zipfile.BadZipFile as e:
        raise ExtractionError(f"Failed to extract ZIP: {e}", stage="outer") from e

    exe = find_bootstrapper(out)
    if exe is None:
        raise NoBootstrapperFound("No .exe found inside ZIP archive")
    logger.info("Found EXE: %s", exe.name)
    return exe


def unwrap_bootstrapper(source: Path, root: Path, tools: Toolset) -> Path:
    """Bootstrapper EXE -> carved attached container file."""
    logger.info("Stage 1: Extracting WiX bootstrapper...")
    out = _stage_dir(root, "stage1")
    try:
        tail_size = tools.archive.extract(source, out)
    except ToolError as e:
        raise ExtractionError(f"Failed to extract EXE: {e}", stage="bootstrapper") from e

    if not tail_size:
        raise NoAppendedContainer(
            "No attached container found in EXE (not a WiX Burn bundle?)"
        )

    logger.info("Stage 2: Extracting attached container...")
    carved = _stage_dir(root, "carve") / "attached.cab"
    try:
        written = carve_tail(source, carved, tail_size, tools.block_size)
    except ValueError as e:
        raise NoAppendedContainer(f"Failed to extract attached container: {e}") from e
    if written != tail_size or carved.stat().st_size == 0:
        raise NoAppendedContainer(
            f"Failed to extract attached container: carved {written} of {tail_size} bytes"
        )
    logger.debug("carved %d bytes at offset %d", written,
                  source.stat().st_size - tail_size)
    return carved


def extract_container(source: Path, root: Path, tools: Toolset) -> Path:
    """Attached cabinet -> the single MSI inside it."""
    out = _stage_dir(root, "cab")
    try:
        tools.archive.extract(source, out)
    except ToolError as e:
        raise NoInstallerPackage(f"Failed to extract attached CAB: {e}") from e

    candidates = sorted(p for p in out.iterdir() if p.is_file())
    if not candidates:
        raise NoInstallerPackage("No MSI found in attached container")
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        raise NoInstallerPackage(f"Expected one MSI in attached container, found: {names}")
    return candidates[0]


def unwrap_installer_package(source: Path, root: Path, tools: Toolset) -> Path:
    """MSI -> directory tree with the original file names."""
    logger.info("Stage 3: Extracting MSI contents...")
    out = _stage_dir(root, "msi")
    try:
        tools.package.extract(source, out)
    except ToolError as e:
        raise PackageExtractionFailed(f"Failed to extract MSI: {e}") from e
    return out


STAGES: Final[tuple[tuple[str, Stage], ...]] = (
    ("outer", unwrap_outer),
    ("bootstrapper", unwrap_bootstrapper),
    ("container", extract_container),
    ("package", unwrap_installer_package),
)


class ContainerExtractor:
    """Run the extraction stages in order inside a workspace."""

    def __init__(self, tools: Toolset, stages: tuple[tuple[str, Stage], ...] = STAGES):
        self.tools = tools
        self.stages = stages
        self.results: list[StageResult] = []

    def extract(self, package: Path | str, workspace: Path | str) -> Path:
        """Unpack ``package`` under ``workspace/extract`` and return that root."""
        package = Path(package)
        root = Path(workspace) / "extract"
        root.mkdir(parents=True, exist_ok=False)

        self.results = []
        current = package
        for name, stage in self.stages:
            current = stage(current, root, self.tools)
            self.results.append(StageResult(stage=name, path=current))
            logger.debug("stage %s -> %s", name, current)
        return root
