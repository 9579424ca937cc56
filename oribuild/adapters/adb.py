"""
adb adapter — talks to attached Android devices.

Three calls are used: ``adb devices`` to enumerate, ``adb -s <id> shell
getprop <key>`` to read a device property, and ``adb -s <id> install``
to push a package.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from oribuild.adapters.base import ToolAdapter
from oribuild.adapters.shell.command import probe, run_command

logger = logging.getLogger(__name__)

ABI_PROPERTY = "ro.product.cpu.abi"


class AdbAdapter(ToolAdapter):
    """The Android Debug Bridge."""

    install_hint = "install the Android platform-tools and put `adb` on PATH"

    @property
    def name(self) -> str:
        return "adb"

    def is_available(self) -> bool:
        return probe(["adb", "version"])

    def devices(self) -> str:
        """Raw ``adb devices`` output: a header line, then one row per device."""
        return run_command(["adb", "devices"]).stdout

    def getprop(self, device_id: str, key: str) -> str:
        result = run_command(["adb", "-s", device_id, "shell", "getprop", key])
        return result.stdout.strip()

    def install(self, device_id: str, apk_path: Path) -> subprocess.CompletedProcess[str]:
        logger.info("Installing %s on %s", apk_path.name, device_id)
        return run_command(["adb", "-s", device_id, "install", str(apk_path)])
