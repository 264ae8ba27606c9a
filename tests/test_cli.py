# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/test_cli.py

"""Tests for the qcom-fw-updater command line."""

from functools import partial
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

from qcom_fw_updater import __version__, cli
from qcom_fw_updater.config import Settings
from qcom_fw_updater.devices import resolve_target
from qcom_fw_updater.pipeline import run_update
from tests.fixtures.package_fixture import build_driver_package, fake_toolset

runner = CliRunner()
GRAPHICS = "ProgramFiles64Folder/Qualcomm/Graphics"


@pytest.fixture
def firmware_base(tmp_path):
    base = tmp_path / "qcom"
    target = base / "x1e80100" / "dell" / "xps13-9345"
    target.mkdir(parents=True)
    (target / "qcvss8380.mbn").write_bytes(b"video v1")
    return base


@pytest.fixture
def package(tmp_path, monkeypatch):
    """A driver package, with the CLI wired to fake tools and no root checks."""
    pkg = build_driver_package(tmp_path / "download", {
        f"{GRAPHICS}/qcvss8380.mbn": b"video v2",
    })

    def fake_run_update(target, settings, **kwargs):
        relaxed = Settings(
            firmware_base=settings.firmware_base,
            device_path=settings.device_path,
            apply=settings.apply,
            owner=None,
            require_root=False,
            show_progress=False,
        )
        return run_update(target, relaxed, tools=fake_toolset(pkg), rebuild=Mock(),
                          **kwargs)

    monkeypatch.setattr(cli, "run_update", fake_run_update)
    return pkg


def invoke(*args):
    return runner.invoke(cli.app, list(args))


class TestUpdate:

    def test_dry_run_exits_pending(self, package, firmware_base):
        result = invoke("update", "--dry-run", "--device-path", "x1e80100/dell/xps13-9345",
                        "--firmware-base", str(firmware_base), str(package.input))
        assert result.exit_code == 2, result.output
        assert "qcvss8380.mbn" in result.output
        assert "CHANGED" in result.output
        assert "Summary: 1 changed, 0 new, 0 same, 16 not in package" in result.output

    def test_apply_then_up_to_date(self, package, firmware_base):
        args = ["update", "--device-path", "x1e80100/dell/xps13-9345",
                "--firmware-base", str(firmware_base), str(package.input)]

        first = invoke(*args)
        assert first.exit_code == 0, first.output
        assert "Reboot to load updated firmware" in first.output
        target = firmware_base / "x1e80100" / "dell" / "xps13-9345"
        assert (target / "qcvss8380.mbn").read_bytes() == b"video v2"

        second = invoke(*args)
        assert second.exit_code == 3, second.output

    def test_environment_configures_paths(self, package, firmware_base):
        result = runner.invoke(
            cli.app, ["update", "--dry-run", str(package.input)],
            env={"QCOM_FW_BASE": str(firmware_base),
                 "QCOM_FW_DEVICE_PATH": "x1e80100/dell/xps13-9345"},
        )
        assert result.exit_code == 2, result.output

    def test_missing_file(self, package, firmware_base, tmp_path):
        result = invoke("update", "--dry-run", "--device-path", "x1e80100/dell/xps13-9345",
                        "--firmware-base", str(firmware_base), str(tmp_path / "nope.zip"))
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_extraction_error_names_stage(self, tmp_path, firmware_base, monkeypatch):
        pkg = build_driver_package(tmp_path / "download", {}, cab_members={})
        monkeypatch.setattr(cli, "run_update", partial(
            run_update, tools=fake_toolset(pkg), rebuild=Mock()))
        result = invoke("update", "--dry-run", "--device-path", "x1e80100/dell/xps13-9345",
                        "--firmware-base", str(firmware_base), str(pkg.input))
        assert result.exit_code == 1
        assert "[bootstrapper]" in result.output

    def test_unknown_device(self, package, firmware_base, monkeypatch, tmp_path):
        model = tmp_path / "model"
        model.write_bytes(b"Raspberry Pi 5\x00")
        monkeypatch.setattr(cli, "resolve_target", partial(resolve_target, model_file=model))
        result = invoke("update", "--dry-run", "--firmware-base", str(firmware_base),
                        str(package.input))
        assert result.exit_code == 1
        assert "Unsupported device: Raspberry Pi 5" in result.output


def test_devices_lists_table():
    result = invoke("devices")
    assert result.exit_code == 0
    assert "xps13-9345" in result.output
    assert "--device-path" in result.output


def test_version():
    result = invoke("version")
    assert result.exit_code == 0
    assert __version__ in result.output
