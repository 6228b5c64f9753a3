import subprocess
from typing import Iterable, List, Optional

from .. import constants as const
from .. import utils
from ..context import DeviceHandle
from ..device import DeviceController
from ..errors import (
    DeviceCommandError,
    DeviceNotFoundError,
    PackageInstallError,
    PatchScriptMissingError,
    RootedDebuggingUnavailableError,
    RuntimeMissingError,
)
from ..i18n import get_string
from ..ui import ui


def confirm_device_connected(dev: DeviceController) -> DeviceHandle:
    ui.echo(get_string("pre_check_device").format(serial=dev.serial))
    line = dev.get_device_line()
    if not line:
        raise DeviceNotFoundError(get_string("pre_err_device_not_found").format(serial=dev.serial))

    ui.echo(get_string("pre_device_found").format(line=line))
    return DeviceHandle(serial=dev.serial, description=line)


def confirm_rooted_debugging(dev: DeviceController) -> str:
    ui.echo(get_string("pre_check_root"))
    response = dev.adb.root()

    if not any(ok in response for ok in const.ROOT_OK_RESPONSES):
        raise RootedDebuggingUnavailableError(
            get_string("pre_err_root_unavailable").format(response=response or "<empty>"),
            response=response,
        )

    # adbd drops the connection while it restarts as root
    if "restarting" in response:
        dev.adb.wait_for_device()

    ui.echo(get_string("pre_root_ok").format(response=response))
    return response


def confirm_patch_script_present(dev: DeviceController) -> None:
    ui.echo(get_string("pre_check_script").format(path=const.PATCH_SCRIPT))
    try:
        listing = dev.adb_shell(f"ls {const.MAGISK_DIR}")
    except DeviceCommandError as e:
        raise PatchScriptMissingError(get_string("pre_err_script_missing").format(path=const.PATCH_SCRIPT, e=e))

    if const.PATCH_SCRIPT_NAME not in listing.split():
        raise PatchScriptMissingError(
            get_string("pre_err_script_missing").format(path=const.PATCH_SCRIPT, e=listing.strip())
        )
    ui.echo(get_string("pre_script_ok"))


def confirm_extraction_runtime() -> str:
    try:
        result = utils.run_command([str(const.PYTHON_EXE), "--version"], capture=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise RuntimeMissingError(get_string("pre_err_runtime_missing").format(exe=const.PYTHON_EXE, e=e))

    version = utils.format_command_output(result)
    if not version.startswith("Python 3"):
        raise RuntimeMissingError(
            get_string("pre_err_runtime_missing").format(exe=const.PYTHON_EXE, e=version or "<empty>")
        )

    ui.echo(get_string("pre_runtime_ok").format(version=version))
    return version


def _package_installed(name: str) -> bool:
    result = utils.run_command(
        [str(const.PYTHON_EXE), "-m", "pip", "show", "--quiet", name],
        capture=True, check=False
    )
    return result.returncode == 0


def ensure_packages(names: Optional[Iterable[str]] = None) -> List[str]:
    installed = []
    for name in (const.REQUIRED_PACKAGES if names is None else names):
        try:
            if _package_installed(name):
                ui.echo(get_string("pre_pkg_present").format(name=name))
                continue

            ui.echo(get_string("pre_pkg_installing").format(name=name))
            utils.run_command([str(const.PYTHON_EXE), "-m", "pip", "install", name], capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            detail = utils.format_command_output(e) if isinstance(e, subprocess.CalledProcessError) else e
            raise PackageInstallError(get_string("pre_err_pkg_install").format(name=name, e=detail or e))

        installed.append(name)
        ui.echo(get_string("pre_pkg_installed").format(name=name))
    return installed
