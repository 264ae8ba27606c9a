# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/diff.py

"""Compare staged firmware against the installed copies."""

import hashlib
from collections import Counter
from pathlib import Path
from typing import Iterable, Sequence

from .manifest import FIRMWARE_FILES
from .types import Classification, DiffRecord, DiffSummary

HASH_CHUNK = 1024 * 1024


def sha256_file(path: Path) -> str:
    """Hex sha256 of a file, read in chunks."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def classify(name: str, staging_dir: Path, target_dir: Path) -> DiffRecord:
    """Build the diff record for a single manifest entry."""
    new_file = staging_dir / name
    cur_file = target_dir / name

    if not new_file.is_file():
        return DiffRecord(name=name, status="not-in-package")

    size = new_file.stat().st_size
    new_hash = sha256_file(new_file)
    if not cur_file.is_file():
        return DiffRecord(name=name, status="new", size=size, new_sha256=new_hash)

    old_hash = sha256_file(cur_file)
    status: Classification = "unchanged" if old_hash == new_hash else "changed"
    return DiffRecord(
        name=name,
        status=status,
        size=size,
        old_sha256=old_hash,
        new_sha256=new_hash,
    )


def compare_firmware(staging_dir: Path | str, target_dir: Path | str,
                     manifest: Sequence[str] = FIRMWARE_FILES) -> list[DiffRecord]:
    """One record per manifest entry, in manifest order."""
    staging_dir = Path(staging_dir)
    target_dir = Path(target_dir)
    return [classify(name, staging_dir, target_dir) for name in manifest]


def summarize(records: Iterable[DiffRecord]) -> DiffSummary:
    counts = Counter(r.status for r in records)
    return DiffSummary(
        changed=counts["changed"],
        new=counts["new"],
        unchanged=counts["unchanged"],
        not_in_package=counts["not-in-package"],
    )


def has_changes(records: Iterable[DiffRecord]) -> bool:
    """True unless every record is unchanged or missing from the package."""
    return summarize(records).pending > 0
