from pathlib import Path

from .. import constants as const
from ..device import DeviceController
from ..errors import DeviceCommandError, PatchInvocationError, TransferError
from ..i18n import get_string
from ..ui import ui


def push_boot_image(dev: DeviceController, boot_img: Path, remote: str = const.REMOTE_BOOT_IMG) -> str:
    ui.echo(get_string("root_push").format(name=boot_img.name, dst=remote))
    dev.push_file(boot_img, remote)
    return remote


def pull_patched_image(dev: DeviceController, local: Path, remote: str = const.REMOTE_PATCHED_IMG) -> Path:
    ui.echo(get_string("root_pull").format(src=remote, name=local.name))
    dev.pull_file(remote, local)
    if not local.is_file():
        raise TransferError(get_string("root_err_pull_missing").format(path=local))
    return local


def invoke_patch(
    dev: DeviceController,
    remote_source: str = const.REMOTE_BOOT_IMG,
    remote_dest: str = const.REMOTE_PATCHED_IMG,
) -> str:
    """Run Magisk's boot_patch.sh on the device and move its output to remote_dest.

    The script's own verdict is not inspected; only a failing shell call or a
    missing output file aborts.
    """
    ui.echo(get_string("root_run_script").format(script=const.PATCH_SCRIPT, src=remote_source))
    try:
        output = dev.adb_shell(f"cd {const.MAGISK_DIR} && sh {const.PATCH_SCRIPT} {remote_source}")
    except DeviceCommandError as e:
        raise PatchInvocationError(get_string("root_err_script").format(e=e))

    for line in output.splitlines():
        ui.echo(f"    {line}")

    try:
        dev.adb_shell(f"mv {const.PATCH_OUTPUT} {remote_dest}")
    except DeviceCommandError as e:
        raise PatchInvocationError(
            get_string("root_err_move").format(src=const.PATCH_OUTPUT, dst=remote_dest, e=e)
        )

    ui.echo(get_string("root_patched").format(path=remote_dest))
    return remote_dest
