"""
Device inventory — which Android devices are attached, and which one
to install to.
"""

from __future__ import annotations

import logging

from oribuild.adapters.adb import ABI_PROPERTY, AdbAdapter
from oribuild.core.errors import (
    AmbiguousDeviceError,
    DeviceNotFoundError,
    NoDeviceError,
)
from oribuild.core.models.device import Device
from oribuild.core.models.target import Target

logger = logging.getLogger(__name__)

DEVICES_HEADER = "List of devices attached"


def parse_device_ids(output: str) -> list[str]:
    """Device ids from ``adb devices`` output.

    Every non-blank line starts with a device id, except the
    ``List of devices attached`` header and the ``* daemon ...`` notices
    adb prints when it has to start its server first.
    """
    ids = []
    for line in output.splitlines():
        if line.startswith(("*", DEVICES_HEADER)):
            continue
        fields = line.split()
        if fields:
            ids.append(fields[0])
    return ids


def list_devices(adb: AdbAdapter) -> list[Device]:
    """Enumerate attached devices and resolve each one's architecture.

    Raises:
        ToolNotInstalledError: adb is not available.
        UnknownAbiError: A device reports an ABI outside the four
            supported ones.
    """
    adb.ensure_available()

    devices = []
    for device_id in parse_device_ids(adb.devices()):
        abi = adb.getprop(device_id, ABI_PROPERTY)
        devices.append(Device(id=device_id, target=Target.from_abi(abi)))
        logger.debug("Found device %s (%s)", device_id, abi)

    logger.info("%d device(s) attached", len(devices))
    return devices


def select_device(devices: list[Device], device_id: str | None = None) -> Device:
    """Pick the device to install to.

    With ``device_id`` the matching device is returned. Without it,
    exactly one device must be attached.
    """
    if device_id is not None:
        for device in devices:
            if device.id == device_id:
                return device
        raise DeviceNotFoundError(device_id, [d.id for d in devices])

    if not devices:
        raise NoDeviceError()
    if len(devices) > 1:
        raise AmbiguousDeviceError(len(devices))
    return devices[0]
