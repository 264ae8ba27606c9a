# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/download.py

"""Fetch a driver package over HTTP(S)."""

import logging
from pathlib import Path

import requests
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TransferSpeedColumn,
)

from .errors import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
TIMEOUT = 60


def download(url: str, dest: Path, show_progress: bool = True) -> Path:
    """Stream ``url`` into ``dest`` and return ``dest``."""
    logger.info("Downloading driver package...")
    try:
        with requests.get(url, stream=True, timeout=TIMEOUT) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length") or 0) or None
            with Progress(
                "[progress.description]{task.description}",
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                disable=not show_progress,
                transient=True,
            ) as progress, dest.open("wb") as out:
                task = progress.add_task(dest.name, total=total)
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    out.write(chunk)
                    progress.advance(task, len(chunk))
    except requests.RequestException as e:
        raise DownloadError(f"Download failed from: {url} ({e})") from e

    logger.info("Downloaded to %s", dest)
    return dest
