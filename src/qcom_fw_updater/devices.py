# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/devices.py

"""Map Snapdragon X machines to their firmware directory."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import UnknownDeviceError
from .manifest import FIRMWARE_BASE

logger = logging.getLogger(__name__)

DT_MODEL: Final = Path("/proc/device-tree/model")


@dataclass(frozen=True)
class Device:
    """One supported machine.

    ``models`` are exact device-tree model strings; ``prefix`` entries match
    any model that starts with the given text.
    """
    soc: str
    name: str
    path: str
    models: tuple[str, ...] = ()
    prefix: str | None = None

    def matches(self, model: str) -> bool:
        if model in self.models:
            return True
        return self.prefix is not None and model.startswith(self.prefix)


X_ELITE = "X Elite (80100)"
X_PLUS = "X Plus  (42100)"

DEVICES: Final = (
    Device(X_ELITE, "Acer Swift 14 AI (SF14-11)", "x1e80100/ACER/SF14-11",
           models=("Acer Swift 14 AI (SF14-11)",)),
    Device(X_ELITE, "ASUS Vivobook S 15", "x1e80100/ASUSTeK/vivobook-s15",
           models=("ASUS Vivobook S 15",)),
    Device(X_PLUS, "ASUS Zenbook A14 (UX3407QA)", "x1p42100/ASUSTeK/zenbook-a14",
           models=("ASUS Zenbook A14 (UX3407QA)",
                   "ASUS Zenbook A14 (UX3407QA, LCD)",
                   "ASUS Zenbook A14 (UX3407QA, OLED)")),
    Device(X_ELITE, "ASUS Zenbook A14 (UX3407RA)", "x1e80100/ASUSTeK/zenbook-a14",
           models=("ASUS Zenbook A14 (UX3407RA)",)),
    Device(X_ELITE, "Dell Inspiron 14 Plus 7441", "x1e80100/dell/inspiron-14-plus-7441",
           models=("Dell Inspiron 14 Plus 7441",)),
    Device(X_ELITE, "Dell Latitude 7455", "x1e80100/dell/latitude-7455",
           models=("Dell Latitude 7455",)),
    Device(X_ELITE, "Dell XPS 13 9345", "x1e80100/dell/xps13-9345",
           models=("Dell XPS 13 9345",)),
    Device(X_PLUS, "HP EliteBook 6 G1q", "x1p42100/hp/elitebook-6-g1q",
           prefix="HP EliteBook 6 G1q"),
    Device(X_ELITE, "HP EliteBook Ultra G1q", "x1e80100/hp/elitebook-ultra-g1q",
           models=("HP EliteBook Ultra G1q",)),
    Device(X_PLUS, 'HP OmniBook 5 16" OLED', "x1p42100/hp/omnibook-5",
           prefix="HP OmniBook 5"),
    Device(X_ELITE, "HP Omnibook X 14", "x1e80100/hp/omnibook-x14",
           models=("HP Omnibook X 14",)),
    Device(X_PLUS, "Lenovo ThinkBook 16 Gen 7", "x1p42100/LENOVO/21NH",
           prefix="Lenovo ThinkBook 16 Gen 7"),
    Device(X_ELITE, "Lenovo ThinkPad T14s Gen 6", "x1e80100/LENOVO/21N1",
           models=("Lenovo ThinkPad T14s Gen 6",)),
    Device(X_ELITE, "Lenovo Yoga Slim 7x", "x1e80100/LENOVO/83ED",
           models=("Lenovo Yoga Slim 7x",)),
    Device(X_ELITE, "Microsoft Surface Laptop 7", "x1e80100/microsoft/Romulus",
           models=("Microsoft Surface Laptop 7 (13.8 inch)",
                   "Microsoft Surface Laptop 7 (15 inch)")),
    Device(X_ELITE, "Samsung Galaxy Book4 Edge", "x1e80100/SAMSUNG/galaxy-book4-edge",
           models=("Samsung Galaxy Book4 Edge",)),
)


def read_model(model_file: Path = DT_MODEL) -> str:
    """Read the device-tree model string, without its trailing NUL."""
    try:
        raw = model_file.read_bytes()
    except OSError as e:
        raise UnknownDeviceError(
            f"Cannot read {model_file}. Use --device-path to specify manually."
        ) from e
    return raw.replace(b"\0", b"").decode("utf-8", errors="replace").strip()


def lookup_device_path(model: str) -> str:
    for device in DEVICES:
        if device.matches(model):
            return device.path
    raise UnknownDeviceError(
        f"Unsupported device: {model}\n"
        "Use --device-path <soc/oem/board> to specify manually.\n"
        "Run 'qcom-fw-updater devices' to see supported machines."
    )


def resolve_target(device_path: str | None = None,
                   firmware_base: Path = FIRMWARE_BASE,
                   model_file: Path = DT_MODEL) -> Path:
    """Install directory for an explicit device path or the detected machine."""
    if device_path:
        logger.info("Using manual device path: %s", device_path)
    else:
        model = read_model(model_file)
        logger.info("Detected device: %s", model)
        device_path = lookup_device_path(model)
    device_path = device_path.strip("/")
    if not device_path or ".." in Path(device_path).parts:
        raise UnknownDeviceError(f"Invalid device path: {device_path!r}")
    return Path(firmware_base) / device_path
