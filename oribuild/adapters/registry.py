"""
Adapter registry — one place to look up the tool adapters.

The workflows never construct adapters themselves; they take a
registry, so tests can register doubles under the same names.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TypeVar

from oribuild.adapters.adb import AdbAdapter
from oribuild.adapters.apk.aapt import BuildToolsAdapter
from oribuild.adapters.base import ToolAdapter
from oribuild.adapters.cargo import CargoAdapter, CrossAdapter

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=ToolAdapter)


class AdapterRegistry:
    """Registry of tool adapters keyed by name."""

    def __init__(self) -> None:
        self._adapters: dict[str, ToolAdapter] = {}

    def register(self, adapter: ToolAdapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.debug("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter

    def get(self, name: str) -> ToolAdapter | None:
        return self._adapters.get(name)

    def require(self, name: str, kind: type[A]) -> A:
        """Look up ``name`` and check it is a ``kind``.

        Raises:
            KeyError: Nothing is registered under ``name``.
        """
        adapter = self._adapters[name]
        if not isinstance(adapter, kind):
            raise TypeError(f"Adapter {name!r} is {type(adapter).__name__}, not {kind.__name__}")
        return adapter

    def list_adapters(self) -> list[str]:
        return list(self._adapters.keys())

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Availability of every registered tool."""
        status = {}
        for name, adapter in self._adapters.items():
            status[name] = {
                "name": name,
                "available": adapter.is_available(),
                "type": adapter.__class__.__name__,
                "install_hint": adapter.install_hint,
            }
        return status


def default_registry(sdk: Path | None = None) -> AdapterRegistry:
    """Registry with the real cargo, cross, adb and build-tools adapters."""
    registry = AdapterRegistry()
    registry.register(CargoAdapter())
    registry.register(CrossAdapter())
    registry.register(AdbAdapter())
    registry.register(BuildToolsAdapter(sdk))
    return registry
