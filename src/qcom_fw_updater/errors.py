# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# qcom-fw-updater/src/qcom_fw_updater/errors.py

"""Exception hierarchy for the firmware updater."""


class FirmwareUpdateError(Exception):
    """Base class for every error the updater reports to the user."""


class PreconditionError(FirmwareUpdateError):
    """Raised before any extraction work starts."""


class MissingToolsError(PreconditionError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Missing dependencies: {' '.join(missing)}\n"
            f"Install with: sudo apt install {' '.join(missing)}"
        )


class UnknownDeviceError(PreconditionError):
    pass


class InputNotFoundError(PreconditionError):
    pass


class UnsupportedInputError(PreconditionError):
    pass


class PrivilegeError(PreconditionError):
    pass


class DownloadError(FirmwareUpdateError):
    pass


class ExtractionError(FirmwareUpdateError):
    """Failure inside one stage of the container extraction pipeline."""

    stage = "extract"

    def __init__(self, message: str, stage: str | None = None):
        if stage is not None:
            self.stage = stage
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class NoBootstrapperFound(ExtractionError):
    stage = "outer"


class NoAppendedContainer(ExtractionError):
    stage = "bootstrapper"


class NoInstallerPackage(ExtractionError):
    stage = "container"


class PackageExtractionFailed(ExtractionError):
    stage = "package"


class NoFirmwareFound(FirmwareUpdateError):
    pass


class SyncError(FirmwareUpdateError):
    """The install target could not be prepared or backed up."""


class ToolError(FirmwareUpdateError):
    """An external extraction or rebuild command exited with an error."""
