from unittest.mock import patch

import pytest
from autoroot.actions import flash
from autoroot.errors import DeviceCommandError, FlashError

from conftest import FakeClock, FakeDevice


class TestAwaitBootloader:
    def test_device_already_present(self, fake_clock):
        dev = FakeDevice(fastboot_after=0)
        assert flash.await_bootloader_device(dev, clock=fake_clock, sleep=fake_clock.sleep) is True
        assert fake_clock.sleeps == []

    def test_device_appears_before_timeout(self, fake_clock):
        dev = FakeDevice(fastboot_after=5)
        found = flash.await_bootloader_device(
            dev, timeout=60, poll_interval=1, clock=fake_clock, sleep=fake_clock.sleep
        )
        assert found is True
        assert dev.fastboot_polls == 6
        assert fake_clock.now == 5

    def test_timeout_returns_without_raising(self, fake_clock):
        dev = FakeDevice(fastboot_after=10_000)
        found = flash.await_bootloader_device(
            dev, timeout=60, poll_interval=2, clock=fake_clock, sleep=fake_clock.sleep
        )
        assert found is False
        assert fake_clock.now == 60
        assert dev.fastboot_polls == 31

    def test_poll_errors_keep_waiting(self):
        clock = FakeClock()
        dev = FakeDevice()
        results = [DeviceCommandError("fastboot not found"), True]

        def check():
            result = results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result

        with patch.object(dev, "check_fastboot_device", side_effect=check):
            assert flash.await_bootloader_device(dev, clock=clock, sleep=clock.sleep) is True


class TestFlash:
    def test_flash_boot_image(self, tmp_path, fake_dev):
        image = tmp_path / "magisk_patched.img"
        image.write_bytes(b"PATCHED")
        flash.flash_boot_image(fake_dev, image)
        assert ("flash_partition", "boot", str(image)) in fake_dev.calls

    def test_flash_refuses_missing_image(self, tmp_path, fake_dev):
        with pytest.raises(FlashError):
            flash.flash_boot_image(fake_dev, tmp_path / "magisk_patched.img")
        assert "flash_partition" not in fake_dev.call_names()

    def test_flash_failure(self, tmp_path, fake_dev):
        image = tmp_path / "magisk_patched.img"
        image.write_bytes(b"PATCHED")
        with patch.object(fake_dev, "flash_partition", side_effect=DeviceCommandError("< waiting for device >")):
            with pytest.raises(FlashError):
                flash.flash_boot_image(fake_dev, image)

    def test_reboot_normal_failure(self, fake_dev):
        with patch.object(fake_dev, "fastboot_reboot_system", side_effect=DeviceCommandError("no device")):
            with pytest.raises(FlashError):
                flash.reboot_normal(fake_dev)

    def test_reboot_to_bootloader(self, fake_dev):
        flash.reboot_to_bootloader(fake_dev)
        assert fake_dev.call_names() == ["reboot_to_bootloader"]
