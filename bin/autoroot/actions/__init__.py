from .preflight import (
    confirm_device_connected,
    confirm_rooted_debugging,
    confirm_patch_script_present,
    confirm_extraction_runtime,
    ensure_packages
)

from .extract import (
    extract_boot_image
)

from .root import (
    push_boot_image,
    invoke_patch,
    pull_patched_image
)

from .flash import (
    reboot_to_bootloader,
    await_bootloader_device,
    flash_boot_image,
    reboot_normal
)
