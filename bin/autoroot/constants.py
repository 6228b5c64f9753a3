import json
import os
from pathlib import Path
from typing import Any, List

APP_DIR = Path(__file__).parent.resolve()
CONFIG_FILE = APP_DIR / "config.json"

FN_BOOT = "boot.img"
FN_PAYLOAD = "payload.bin"
FN_BUILD_ZIP = "build.zip"
FN_PAYLOAD_DUMPER_ZIP = "payload_dumper.zip"
FN_PATCHED_BOOT = "magisk_patched.img"

WORKSPACE_NAME_LENGTH = 20

_config = {}

def load_config() -> None:
    global _config
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
                _config = json.load(f)
        except (OSError, ValueError) as e:
            raise RuntimeError(f"[!] Critical Error: Failed to load config.json: {e}")
    else:
        raise RuntimeError(f"[!] Critical Error: Configuration file missing: {CONFIG_FILE}")

def _get_cfg(section: str, key: str, default: Any = None) -> Any:
    if not _config:
        load_config()
    try:
        return _config[section][key]
    except KeyError:
        if default is not None:
            return default
        raise RuntimeError(f"[!] Critical Error: Missing configuration key: [{section}][{key}]")

def _tool_path(env_var: str, key: str) -> Path:
    return Path(os.environ.get(env_var) or _get_cfg("tools", key))

if not _config:
    load_config()
APP_VERSION = _config.get("version", "0.0.0")

ADB_EXE = _tool_path("AUTOROOT_ADB", "adb")
FASTBOOT_EXE = _tool_path("AUTOROOT_FASTBOOT", "fastboot")
PYTHON_EXE = _tool_path("AUTOROOT_PYTHON", "python")

PAYLOAD_DUMPER_URL = _get_cfg("tools", "payload_dumper_url")
PAYLOAD_DUMPER_SCRIPT = _get_cfg("tools", "payload_dumper_script")
REQUIRED_PACKAGES: List[str] = list(_get_cfg("tools", "required_packages"))

BUILDS_LISTING_URL = _get_cfg("builds", "listing_url").rstrip("/")
MODEL_PROP = _get_cfg("builds", "model_prop")
VERSION_PROP = _get_cfg("builds", "version_prop")
ARTIFACT_SUFFIX = _get_cfg("builds", "artifact_suffix")

MAGISK_DIR = _get_cfg("device", "magisk_dir").rstrip("/")
PATCH_SCRIPT_NAME = _get_cfg("device", "patch_script")
PATCH_SCRIPT = f"{MAGISK_DIR}/{PATCH_SCRIPT_NAME}"
PATCH_OUTPUT = f"{MAGISK_DIR}/{_get_cfg('device', 'patch_output')}"
STAGING_DIR = _get_cfg("device", "staging_dir").rstrip("/")
REMOTE_BOOT_IMG = f"{STAGING_DIR}/{_get_cfg('device', 'staged_boot')}"
REMOTE_PATCHED_IMG = f"{STAGING_DIR}/{_get_cfg('device', 'patched_boot')}"
ROOT_OK_RESPONSES: List[str] = list(_get_cfg("device", "root_ok_responses"))

BOOTLOADER_WAIT_TIMEOUT = float(_get_cfg("timeouts", "bootloader_wait"))
BOOTLOADER_POLL_INTERVAL = float(_get_cfg("timeouts", "bootloader_poll"))
HTTP_TIMEOUT = int(_get_cfg("timeouts", "http"))
HTTP_RETRIES = int(_get_cfg("timeouts", "http_retries"))
