# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/conftest.py
"""Pytest configuration for qcom-fw-updater tests."""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-tool-tests",
        action="store_true",
        default=False,
        help="Run tests that need 7-Zip and msitools installed",
    )


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "tools_required: mark test as requiring real 7-Zip / msitools binaries",
    )


def pytest_collection_modifyitems(config, items):
    """Skip real-tool tests unless --run-tool-tests is passed."""
    if config.getoption("--run-tool-tests"):
        return
    skip_tools = pytest.mark.skip(reason="need --run-tool-tests option to run")
    for item in items:
        if "tools_required" in item.keywords:
            item.add_marker(skip_tools)
