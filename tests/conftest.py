import os
import sys
import zipfile
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../bin")))

SERIAL = "ABCD123456"
DEVICE_LINE = f"{SERIAL}             device usb:1-1 product:lemonadep model:LE2125 device:OnePlus9Pro transport_id:3"
PATCH_OUTPUT = "- Unpacking boot image\n- Patching ramdisk\n- Repacking boot image\n- All done!"


class FakeDevice:
    """In-memory stand-in for DeviceController that records every call."""

    def __init__(
        self,
        serial: str = SERIAL,
        connected: Optional[List[str]] = None,
        root_response: str = "adbd is already running as root",
        magisk_files: Optional[List[str]] = None,
        props: Optional[Dict[str, str]] = None,
        fastboot_after: int = 0,
    ):
        self.serial = serial
        self.connected = [DEVICE_LINE] if connected is None else connected
        self.magisk_files = ["boot_patch.sh", "magiskboot", "util_functions.sh"] if magisk_files is None else magisk_files
        self.props = props if props is not None else {
            "ro.product.device": "lemonadep",
            "ro.lineage.version": "20.0-20231002-NIGHTLY-lemonadep",
        }
        self.fastboot_after = fastboot_after
        self.fastboot_polls = 0
        self.calls: List[tuple] = []
        self.remote_files: Dict[str, bytes] = {}
        self.adb = SimpleNamespace(
            root=lambda: self._record("root", root_response),
            wait_for_device=lambda: self._record("wait_for_device", None),
        )

    def _record(self, name, value, *args):
        self.calls.append((name,) + args)
        return value

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def get_device_line(self):
        for line in self.connected:
            if line.split()[0] == self.serial:
                return self._record("get_device_line", line)
        return self._record("get_device_line", None)

    def get_prop(self, name):
        return self._record("get_prop", self.props.get(name, ""), name)

    def adb_shell(self, command):
        self.calls.append(("adb_shell", command))
        if command.startswith("ls "):
            return "\n".join(self.magisk_files)
        if " sh " in command:
            self.remote_files["/data/adb/magisk/new-boot.img"] = b"PATCHED" + self.remote_files.get(
                "/sdcard/Download/boot.img", b""
            )
            return PATCH_OUTPUT
        if command.startswith("mv "):
            _, src, dst = command.split()
            self.remote_files[dst] = self.remote_files.pop(src)
            return ""
        return ""

    def push_file(self, local, remote):
        self.calls.append(("push_file", str(local), remote))
        self.remote_files[remote] = Path(local).read_bytes()

    def pull_file(self, remote, local):
        self.calls.append(("pull_file", remote, str(local)))
        Path(local).write_bytes(self.remote_files[remote])

    def reboot_to_bootloader(self):
        self.calls.append(("reboot_to_bootloader",))

    def check_fastboot_device(self):
        self.calls.append(("check_fastboot_device",))
        self.fastboot_polls += 1
        return self.fastboot_polls > self.fastboot_after

    def flash_partition(self, partition, image):
        self.calls.append(("flash_partition", partition, str(image)))

    def fastboot_reboot_system(self):
        self.calls.append(("fastboot_reboot_system",))


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_dev():
    return FakeDevice()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_zip(tmp_path):
    def _make(name: str, members: Dict[str, bytes]) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for member, data in members.items():
                zf.writestr(member, data)
        return path

    return _make
