import time
from pathlib import Path
from typing import Callable

from .. import constants as const
from ..device import DeviceController
from ..errors import DeviceCommandError, FlashError
from ..i18n import get_string
from ..ui import ui


def reboot_to_bootloader(dev: DeviceController) -> None:
    ui.echo(get_string("flash_reboot_bootloader"))
    dev.reboot_to_bootloader()


def await_bootloader_device(
    dev: DeviceController,
    timeout: float = const.BOOTLOADER_WAIT_TIMEOUT,
    poll_interval: float = const.BOOTLOADER_POLL_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll fastboot until the device shows up or ``timeout`` seconds pass.

    Returns False on timeout instead of raising; the flash that follows fails
    on its own if the device never arrived.
    """
    ui.echo(get_string("flash_wait_bootloader").format(timeout=int(timeout)))
    deadline = clock() + timeout

    while True:
        try:
            if dev.check_fastboot_device():
                ui.echo(get_string("flash_bootloader_ready"))
                return True
        except DeviceCommandError as e:
            ui.warn(get_string("flash_warn_poll").format(e=e))

        if clock() >= deadline:
            ui.warn(get_string("flash_warn_timeout").format(timeout=int(timeout)))
            return False
        sleep(poll_interval)


def flash_boot_image(dev: DeviceController, image: Path) -> None:
    if not image.is_file():
        raise FlashError(get_string("flash_err_image_missing").format(path=image))

    ui.echo(get_string("flash_boot").format(name=image.name))
    try:
        dev.flash_partition("boot", image)
    except DeviceCommandError as e:
        raise FlashError(get_string("flash_err_boot").format(e=e))
    ui.echo(get_string("flash_boot_ok"))


def reboot_normal(dev: DeviceController) -> None:
    ui.echo(get_string("flash_reboot_system"))
    try:
        dev.fastboot_reboot_system()
    except DeviceCommandError as e:
        raise FlashError(get_string("flash_err_reboot").format(e=e))
