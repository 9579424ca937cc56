"""
Tests for the device inventory — adb output parsing and device selection.
"""

import pytest

from conftest import HEADER_LINE, FakeAdb
from oribuild.core.errors import (
    AmbiguousDeviceError,
    DeviceNotFoundError,
    NoDeviceError,
    ToolNotInstalledError,
    UnknownAbiError,
)
from oribuild.core.models import Device, Target
from oribuild.core.services.devices import list_devices, parse_device_ids, select_device


class TestParseDeviceIds:
    def test_header_only(self):
        assert parse_device_ids(HEADER_LINE) == []

    def test_empty_output(self):
        assert parse_device_ids("") == []

    def test_devices_and_blank_lines(self):
        output = HEADER_LINE + "deadbeef001\tdevice\nemulator-5554\tdevice\n\n"
        assert parse_device_ids(output) == ["deadbeef001", "emulator-5554"]

    def test_extra_columns(self):
        output = HEADER_LINE + "deadbeef001    device usb:1-1 product:x model:Pixel\n"
        assert parse_device_ids(output) == ["deadbeef001"]

    def test_daemon_startup_notices(self):
        output = (
            "* daemon not running; starting now at tcp:5037\n"
            "* daemon started successfully\n"
            + HEADER_LINE
            + "emulator-5554\tdevice\n"
        )
        assert parse_device_ids(output) == ["emulator-5554"]


class TestListDevices:
    def test_single_device(self):
        adb = FakeAdb(HEADER_LINE + "deadbeef001    device\n", {"deadbeef001": "arm64-v8a"})
        assert list_devices(adb) == [Device(id="deadbeef001", target=Target.ARM64_V8A)]

    def test_no_devices(self):
        assert list_devices(FakeAdb(HEADER_LINE, {})) == []

    def test_several_devices(self):
        adb = FakeAdb(
            HEADER_LINE + "phone\tdevice\nemulator-5554\tdevice\n",
            {"phone": "armeabi-v7a", "emulator-5554": "x86_64"},
        )
        assert [d.target for d in list_devices(adb)] == [Target.ARMV7A, Target.X86_64]

    def test_unknown_abi(self):
        adb = FakeAdb(HEADER_LINE + "old\tdevice\n", {"old": "mips"})
        with pytest.raises(UnknownAbiError, match="mips"):
            list_devices(adb)

    def test_adb_missing(self, monkeypatch):
        adb = FakeAdb(HEADER_LINE, {})
        monkeypatch.setattr(adb, "is_available", lambda: False)
        with pytest.raises(ToolNotInstalledError, match="adb"):
            list_devices(adb)


class TestSelectDevice:
    phone = Device(id="phone", target=Target.ARM64_V8A)
    emulator = Device(id="emulator-5554", target=Target.X86_64)

    def test_exactly_one(self):
        assert select_device([self.phone]) == self.phone

    def test_none(self):
        with pytest.raises(NoDeviceError):
            select_device([])

    def test_ambiguous(self):
        with pytest.raises(AmbiguousDeviceError) as exc:
            select_device([self.phone, self.emulator])
        assert exc.value.count == 2
        assert "2 devices" in str(exc.value)

    def test_by_id(self):
        assert select_device([self.phone, self.emulator], "emulator-5554") == self.emulator

    def test_by_unknown_id(self):
        with pytest.raises(DeviceNotFoundError, match="phone") as exc:
            select_device([self.phone], "tablet")
        assert exc.value.device_id == "tablet"
        assert exc.value.available == ["phone"]
