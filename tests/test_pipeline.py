# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/test_pipeline.py

"""End-to-end runs of the update pipeline with fake extraction tools."""

import tempfile
from unittest.mock import Mock

import pytest

from qcom_fw_updater import pipeline, tools
from qcom_fw_updater.config import Settings
from qcom_fw_updater.errors import (
    InputNotFoundError,
    NoAppendedContainer,
    NoFirmwareFound,
    PreconditionError,
    PrivilegeError,
    UnsupportedInputError,
)
from qcom_fw_updater.pipeline import run_update
from qcom_fw_updater.sync import backup_path
from qcom_fw_updater.types import Outcome
from tests.fixtures.package_fixture import build_driver_package, fake_toolset

GRAPHICS = "ProgramFiles64Folder/Qualcomm/Graphics"
MANIFEST = ("qcvss8380.mbn", "qcdxkmsuc8380.mbn", "unified_ksqs.bin")
HIGH_IMPACT = frozenset({"qcdxkmsuc8380.mbn"})


@pytest.fixture(autouse=True)
def private_tempdir(tmp_path, monkeypatch):
    """Point tempfile at a directory the test can inspect."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture
def scenario(tmp_path):
    """Package with 2 of 3 manifest entries; target has one same, one different."""
    pkg = build_driver_package(tmp_path / "download", {
        f"{GRAPHICS}/qcvss8380.mbn": b"video v2",
        f"{GRAPHICS}/QCDXKMSUC8380.MBN": b"kms v2",
        f"{GRAPHICS}/qcdx8380.dll": b"windows",
    })
    target = tmp_path / "qcom" / "x1e80100" / "dell" / "xps13-9345"
    target.mkdir(parents=True)
    (target / "qcvss8380.mbn").write_bytes(b"video v2")
    (target / "qcdxkmsuc8380.mbn").write_bytes(b"kms v1")
    return pkg, target


def settings(apply: bool) -> Settings:
    return Settings(apply=apply, owner=None, require_root=False, show_progress=False)


def run(pkg, target, apply, **kwargs):
    kwargs.setdefault("rebuild", Mock())
    kwargs.setdefault("high_impact", HIGH_IMPACT)
    return run_update(target, settings(apply), package=pkg.input,
                      tools=fake_toolset(pkg), manifest=MANIFEST, **kwargs)


class TestScenario:

    def test_diff_records(self, scenario):
        pkg, target = scenario
        result = run(pkg, target, apply=False)
        assert [(r.name, r.status) for r in result.records] == [
            ("qcvss8380.mbn", "unchanged"),
            ("qcdxkmsuc8380.mbn", "changed"),
            ("unified_ksqs.bin", "not-in-package"),
        ]
        assert result.located.found == 2

    def test_dry_run_reports_pending_and_touches_nothing(self, scenario):
        pkg, target = scenario
        mtime = target.stat().st_mtime_ns
        contents = {p.name: p.read_bytes() for p in target.iterdir()}

        result = run(pkg, target, apply=False)

        assert result.outcome is Outcome.PENDING
        assert result.outcome.exit_code == 2
        assert result.sync is None
        assert target.stat().st_mtime_ns == mtime
        assert {p.name: p.read_bytes() for p in target.iterdir()} == contents
        assert not list(target.parent.glob("*.bak-*"))

    def test_apply_installs_one_file_and_rebuilds(self, scenario):
        pkg, target = scenario
        rebuild = Mock()

        result = run(pkg, target, apply=True, rebuild=rebuild)

        assert result.outcome is Outcome.APPLIED
        assert result.sync.installed == ["qcdxkmsuc8380.mbn"]
        assert (target / "qcdxkmsuc8380.mbn").read_bytes() == b"kms v2"
        assert result.sync.backup.is_dir()
        assert (result.sync.backup / "qcdxkmsuc8380.mbn").read_bytes() == b"kms v1"
        rebuild.assert_called_once_with()

    def test_apply_without_high_impact_change_skips_rebuild(self, scenario):
        pkg, target = scenario
        rebuild = Mock()
        result = run(pkg, target, apply=True, rebuild=rebuild, high_impact=frozenset())
        assert result.sync.installed == ["qcdxkmsuc8380.mbn"]
        rebuild.assert_not_called()

    def test_up_to_date_never_runs_synchronizer(self, scenario, monkeypatch):
        pkg, target = scenario
        (target / "qcdxkmsuc8380.mbn").write_bytes(b"kms v2")
        (target / "leftover.dll").write_bytes(b"windows")
        mtime = target.stat().st_mtime_ns
        synchronizer = Mock()
        monkeypatch.setattr(pipeline, "Synchronizer", synchronizer)

        result = run(pkg, target, apply=True)

        assert result.outcome is Outcome.UP_TO_DATE
        assert result.outcome.exit_code == 3
        synchronizer.assert_not_called()
        assert target.stat().st_mtime_ns == mtime
        assert (target / "leftover.dll").exists()

    def test_on_diff_called_before_install(self, scenario):
        pkg, target = scenario
        seen = []

        def on_diff(records, summary):
            seen.append((summary.pending, (target / "qcdxkmsuc8380.mbn").read_bytes()))

        run(pkg, target, apply=True, on_diff=on_diff)
        assert seen == [(1, b"kms v1")]


class TestWorkspace:

    def test_removed_after_success(self, scenario, private_tempdir):
        pkg, target = scenario
        run(pkg, target, apply=True)
        assert list(private_tempdir.iterdir()) == []

    def test_removed_after_failure(self, tmp_path, private_tempdir):
        pkg = build_driver_package(tmp_path / "download", {"readme.txt": b"no firmware"})
        with pytest.raises(NoFirmwareFound):
            run(pkg, tmp_path / "target", apply=False)
        assert list(private_tempdir.iterdir()) == []

    def test_removed_after_extraction_error(self, tmp_path, private_tempdir):
        pkg = build_driver_package(tmp_path / "download", {}, cab_members={})
        with pytest.raises(NoAppendedContainer):
            run(pkg, tmp_path / "target", apply=False)
        assert list(private_tempdir.iterdir()) == []


class TestPreconditions:

    def test_missing_input(self, tmp_path, private_tempdir):
        with pytest.raises(InputNotFoundError):
            run_update(tmp_path / "target", settings(False),
                       package=tmp_path / "missing.zip", tools=Mock(), rebuild=Mock())
        assert list(private_tempdir.iterdir()) == []

    def test_unsupported_suffix(self, tmp_path):
        package = tmp_path / "driver.7z"
        package.write_bytes(b"7z")
        with pytest.raises(UnsupportedInputError):
            run_update(tmp_path / "target", settings(False), package=package,
                       tools=Mock(), rebuild=Mock())

    def test_needs_exactly_one_input(self, tmp_path, scenario):
        pkg, target = scenario
        with pytest.raises(PreconditionError):
            run_update(target, settings(False), tools=Mock(), rebuild=Mock())
        with pytest.raises(PreconditionError):
            run_update(target, settings(False), package=pkg.input,
                       url="https://example.com/driver.zip", tools=Mock(), rebuild=Mock())

    def test_apply_requires_root(self, scenario, monkeypatch):
        pkg, target = scenario
        monkeypatch.setattr(pipeline.os, "geteuid", lambda: 1000)
        strict = Settings(apply=True, require_root=True)
        with pytest.raises(PrivilegeError):
            run_update(target, strict, package=pkg.input, tools=Mock(), rebuild=Mock())

    def test_dry_run_does_not_require_root(self, scenario, monkeypatch):
        pkg, target = scenario
        monkeypatch.setattr(pipeline.os, "geteuid", lambda: 1000)
        strict = Settings(apply=False, require_root=True, show_progress=False)
        result = run_update(target, strict, package=pkg.input, tools=fake_toolset(pkg),
                            manifest=MANIFEST, rebuild=Mock())
        assert result.outcome is Outcome.PENDING

    def test_missing_tools_checked_before_workspace(self, scenario, monkeypatch,
                                                    private_tempdir):
        pkg, target = scenario
        monkeypatch.setattr(tools.shutil, "which", lambda name: None)
        with pytest.raises(PreconditionError, match="Missing dependencies"):
            run_update(target, settings(False), package=pkg.input, rebuild=Mock())
        assert list(private_tempdir.iterdir()) == []


class TestDownload:

    def test_url_input_is_downloaded_into_workspace(self, scenario, monkeypatch,
                                                    private_tempdir):
        pkg, target = scenario
        fetched = []

        def fake_download(url, dest, show_progress=True):
            assert dest.parent.parent == private_tempdir
            dest.write_bytes(pkg.input.read_bytes())
            fetched.append(url)
            return dest

        monkeypatch.setattr(pipeline, "download", fake_download)
        result = run_update(target, settings(False), url="https://example.com/d.zip",
                            tools=fake_toolset(pkg), manifest=MANIFEST, rebuild=Mock())

        assert fetched == ["https://example.com/d.zip"]
        assert result.outcome is Outcome.PENDING
        assert list(private_tempdir.iterdir()) == []
