import subprocess
from pathlib import Path
from typing import List, Optional, Union

from . import constants as const
from . import utils
from .errors import DeviceCommandError, TransferError
from .i18n import get_string


def _describe(e: Exception) -> str:
    if isinstance(e, subprocess.CalledProcessError):
        output = "\n".join(
            part.strip() for part in (e.stderr or "", e.output or "") if part and part.strip()
        )
        return f"exit code {e.returncode}: {output}" if output else f"exit code {e.returncode}"
    return str(e)


class AdbManager:
    def __init__(self, serial: Optional[str] = None):
        self.serial = serial

    def _cmd(self, *args: str) -> List[str]:
        command = [str(const.ADB_EXE)]
        if self.serial:
            command += ["-s", self.serial]
        return command + list(args)

    def list_devices(self) -> List[str]:
        try:
            result = utils.run_command([str(const.ADB_EXE), "devices", "-l"], capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise DeviceCommandError(get_string("device_err_list_adb").format(e=_describe(e)))

        lines = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line or line.startswith("List of devices") or line.startswith("*"):
                continue
            lines.append(line)
        return lines

    def find_device(self, serial: str) -> Optional[str]:
        for line in self.list_devices():
            if line.split()[0] == serial:
                return line
        return None

    def root(self) -> str:
        try:
            result = utils.run_command(self._cmd("root"), capture=True, check=False)
        except FileNotFoundError as e:
            raise DeviceCommandError(get_string("device_err_root").format(e=e))
        return utils.format_command_output(result)

    def wait_for_device(self) -> None:
        try:
            utils.run_command(self._cmd("wait-for-device"), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise DeviceCommandError(get_string("device_err_wait_adb").format(e=_describe(e)))

    def get_prop(self, name: str) -> str:
        try:
            result = utils.run_command(self._cmd("shell", "getprop", name), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise DeviceCommandError(get_string("device_err_getprop").format(name=name, e=_describe(e)))
        return "".join(result.stdout.split())

    def shell(self, command: str) -> str:
        try:
            result = utils.run_command(self._cmd("shell", command), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise DeviceCommandError(get_string("device_err_shell").format(cmd=command, e=_describe(e)))
        return utils.format_command_output(result)

    def push_file(self, local: Union[str, Path], remote: str) -> None:
        try:
            utils.run_command(self._cmd("push", str(local), remote), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise TransferError(get_string("device_err_push").format(src=local, dst=remote, e=_describe(e)))

    def pull_file(self, remote: str, local: Union[str, Path]) -> None:
        try:
            utils.run_command(self._cmd("pull", remote, str(local)), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise TransferError(get_string("device_err_pull").format(src=remote, dst=local, e=_describe(e)))

    def reboot_bootloader(self) -> None:
        try:
            utils.run_command(self._cmd("reboot", "bootloader"), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise DeviceCommandError(get_string("device_err_reboot").format(e=_describe(e)))


class FastbootManager:
    def __init__(self, serial: Optional[str] = None):
        self.serial = serial

    def _cmd(self, *args: str) -> List[str]:
        command = [str(const.FASTBOOT_EXE)]
        if self.serial:
            command += ["-s", self.serial]
        return command + list(args)

    def list_devices(self) -> List[str]:
        try:
            result = utils.run_command([str(const.FASTBOOT_EXE), "devices"], capture=True, check=False)
        except FileNotFoundError as e:
            raise DeviceCommandError(get_string("device_err_list_fastboot").format(e=e))
        return [line.split()[0] for line in result.stdout.splitlines() if line.strip()]

    def check_device(self) -> bool:
        return self.serial in self.list_devices()

    def flash(self, partition: str, image: Union[str, Path]) -> None:
        try:
            utils.run_command(self._cmd("flash", partition, str(image)), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise DeviceCommandError(get_string("device_err_flash").format(partition=partition, e=_describe(e)))

    def reboot_system(self) -> None:
        try:
            utils.run_command(self._cmd("reboot"), capture=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise DeviceCommandError(get_string("device_err_reboot").format(e=_describe(e)))


class DeviceController:
    def __init__(self, serial: str):
        self.serial = serial
        self.adb = AdbManager(serial)
        self.fastboot = FastbootManager(serial)

    def get_device_line(self) -> Optional[str]:
        return self.adb.find_device(self.serial)

    def get_prop(self, name: str) -> str:
        return self.adb.get_prop(name)

    def adb_shell(self, command: str) -> str:
        return self.adb.shell(command)

    def push_file(self, local: Union[str, Path], remote: str) -> None:
        self.adb.push_file(local, remote)

    def pull_file(self, remote: str, local: Union[str, Path]) -> None:
        self.adb.pull_file(remote, local)

    def reboot_to_bootloader(self) -> None:
        self.adb.reboot_bootloader()

    def check_fastboot_device(self) -> bool:
        return self.fastboot.check_device()

    def flash_partition(self, partition: str, image: Union[str, Path]) -> None:
        self.fastboot.flash(partition, image)

    def fastboot_reboot_system(self) -> None:
        self.fastboot.reboot_system()
