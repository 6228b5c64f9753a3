from unittest.mock import patch

import pytest
from autoroot.actions import root
from autoroot.errors import DeviceCommandError, PatchInvocationError, TransferError

from conftest import FakeDevice


def test_invoke_patch_moves_output(fake_dev):
    fake_dev.remote_files["/sdcard/Download/boot.img"] = b"ANDROID!"

    dest = root.invoke_patch(fake_dev)

    assert dest == "/sdcard/Download/magisk_patched.img"
    commands = [c[1] for c in fake_dev.calls if c[0] == "adb_shell"]
    assert commands == [
        "cd /data/adb/magisk && sh /data/adb/magisk/boot_patch.sh /sdcard/Download/boot.img",
        "mv /data/adb/magisk/new-boot.img /sdcard/Download/magisk_patched.img",
    ]
    assert fake_dev.remote_files[dest] == b"PATCHEDANDROID!"


def test_invoke_patch_shell_error(fake_dev):
    with patch.object(fake_dev, "adb_shell", side_effect=DeviceCommandError("device offline")):
        with pytest.raises(PatchInvocationError):
            root.invoke_patch(fake_dev)


def test_invoke_patch_output_missing(fake_dev):
    def shell(command):
        if command.startswith("mv "):
            raise DeviceCommandError("mv: /data/adb/magisk/new-boot.img: No such file or directory")
        return "! Unable to detect target image"

    with patch.object(fake_dev, "adb_shell", side_effect=shell):
        with pytest.raises(PatchInvocationError) as exc_info:
            root.invoke_patch(fake_dev)
    assert "new-boot.img" in str(exc_info.value)


def test_push_and_pull_round_trip(tmp_path):
    dev = FakeDevice()
    boot = tmp_path / "boot.img"
    boot.write_bytes(b"ANDROID!")

    remote = root.push_boot_image(dev, boot)
    root.invoke_patch(dev, remote)
    patched = root.pull_patched_image(dev, tmp_path / "magisk_patched.img")

    assert patched.read_bytes() == b"PATCHEDANDROID!"


def test_pull_without_local_file(tmp_path, fake_dev):
    with patch.object(fake_dev, "pull_file"):
        with pytest.raises(TransferError):
            root.pull_patched_image(fake_dev, tmp_path / "magisk_patched.img")


def test_push_error_propagates(tmp_path, fake_dev):
    boot = tmp_path / "boot.img"
    boot.write_bytes(b"ANDROID!")
    with patch.object(fake_dev, "push_file", side_effect=TransferError("no space left")):
        with pytest.raises(TransferError):
            root.push_boot_image(fake_dev, boot)
