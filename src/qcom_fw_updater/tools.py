# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/tools.py

"""Adapters around the external extraction and rebuild commands.

The rest of the package only talks to the protocols defined here, so the
coupling to a particular 7-Zip or msitools release stays in this module and
tests can substitute fakes.
"""

import logging
import platform
import re
import shutil
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from .errors import MissingToolsError, ToolError
from .manifest import REBUILD_COMMAND

logger = logging.getLogger(__name__)

# 7zz ships with the upstream 7-Zip release, 7z with p7zip
SEVEN_ZIP_NAMES = ("7zz", "7z")
MSIEXTRACT = "msiextract"

_TAIL_SIZE_RE = re.compile(r"^Tail Size = (\d+)\s*$", re.MULTILINE)


class ArchiveTool(Protocol):
    """Generic archive extractor.

    ``extract`` unpacks ``archive`` into ``dest`` and returns the length of
    any trailing region the archive format did not account for (the
    appended-container length), or ``None`` when the tool reported none.
    Raises ``ToolError`` when the tool fails.
    """

    def extract(self, archive: Path, dest: Path) -> int | None: ...


class PackageTool(Protocol):
    """Installer-package extractor that keeps real file names."""

    def extract(self, package: Path, dest: Path) -> None: ...


def parse_tail_size(output: str) -> int | None:
    """Pull the ``Tail Size = N`` field out of 7-Zip's listing output."""
    match = _TAIL_SIZE_RE.search(output)
    if match is None:
        return None
    return int(match.group(1))


def find_seven_zip() -> str | None:
    for name in SEVEN_ZIP_NAMES:
        path = shutil.which(name)
        if path:
            return path
    return None


def check_tools() -> None:
    """Fail early, naming every missing package at once."""
    missing = []
    if find_seven_zip() is None:
        missing.append("7zip")
    if shutil.which(MSIEXTRACT) is None:
        missing.append("msitools")
    if missing:
        raise MissingToolsError(missing)


def _run(cmd: Sequence[str], cwd: Path | None = None) -> subprocess.CompletedProcess:
    logger.debug("running %s", " ".join(cmd))
    try:
        return subprocess.run(
            list(cmd), cwd=cwd, capture_output=True, text=True, check=True
        )
    except FileNotFoundError as e:
        raise ToolError(f"{cmd[0]} not found") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or "").strip()
        raise ToolError(
            f"{Path(cmd[0]).name} exited with status {e.returncode}: {detail}"
        ) from e


class SevenZip:
    """``ArchiveTool`` backed by the 7-Zip command line."""

    def __init__(self, executable: str | None = None):
        self.executable = executable or find_seven_zip()
        if self.executable is None:
            raise MissingToolsError(["7zip"])

    def extract(self, archive: Path, dest: Path) -> int | None:
        result = _run([self.executable, "x", str(archive), f"-o{dest}", "-y"])
        # 7-Zip writes the archive properties, including Tail Size, to
        # stdout but some builds route them through stderr
        return parse_tail_size(f"{result.stdout}\n{result.stderr}")


class MsiExtract:
    """``PackageTool`` backed by msitools' ``msiextract``."""

    def __init__(self, executable: str | None = None):
        self.executable = executable or shutil.which(MSIEXTRACT)
        if self.executable is None:
            raise MissingToolsError(["msitools"])

    def extract(self, package: Path, dest: Path) -> None:
        # msiextract writes relative to the current directory
        _run([self.executable, str(package)], cwd=dest)


class CommandTrigger:
    """Run a fixed command once; used for the initramfs rebuild."""

    def __init__(self, command: Sequence[str] = REBUILD_COMMAND):
        kernel = platform.release()
        self.command = [part.format(kernel=kernel) for part in command]

    def __call__(self) -> None:
        _run(self.command)
