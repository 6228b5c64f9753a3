class ToolError(Exception):
    """Base class for every failure that aborts a run."""


class DeviceCommandError(ToolError):
    """An adb or fastboot invocation failed or could not be started."""


class PreflightError(ToolError):
    pass


class DeviceNotFoundError(PreflightError):
    pass


class RootedDebuggingUnavailableError(PreflightError):
    def __init__(self, message: str, response: str = ""):
        super().__init__(message)
        self.response = response


class PatchScriptMissingError(PreflightError):
    pass


class RuntimeMissingError(PreflightError):
    pass


class PackageInstallError(PreflightError):
    pass


class AcquisitionError(ToolError):
    pass


class BuildResolutionError(AcquisitionError):
    pass


class DownloadError(AcquisitionError):
    pass


class UnsupportedArchiveFormatError(AcquisitionError):
    pass


class MissingExtractedFileError(AcquisitionError, FileNotFoundError):
    pass


class TransferError(ToolError):
    pass


class PatchInvocationError(ToolError):
    pass


class FlashError(ToolError):
    pass
