"""Adapters — bindings for the external tools the build drives.

Public re-exports for convenient access.
"""

from oribuild.adapters.adb import AdbAdapter
from oribuild.adapters.base import ToolAdapter
from oribuild.adapters.cargo import CargoAdapter, CrossAdapter
from oribuild.adapters.registry import AdapterRegistry, default_registry
from oribuild.adapters.sdk_repository import SdkRepository

__all__ = [
    "AdapterRegistry",
    "AdbAdapter",
    "CargoAdapter",
    "CrossAdapter",
    "SdkRepository",
    "ToolAdapter",
    "default_registry",
]
