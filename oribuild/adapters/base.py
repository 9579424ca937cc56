"""
Adapter base — the contract between the pipeline and external tools.

Every external program the build shells out to (cargo, cross, adb,
the SDK build-tools) sits behind a ToolAdapter. The pipeline probes
``is_available()`` up front, before any expensive work, so a missing
tool is reported as such and not as a failed spawn halfway through.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from oribuild.core.errors import ToolNotInstalledError


class ToolAdapter(ABC):
    """Abstract base class for external tool bindings.

    To create a new adapter:
        1. Subclass ToolAdapter
        2. Implement name and is_available
        3. Register it in the AdapterRegistry
    """

    #: One-line instruction shown when the tool is missing.
    install_hint: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'adb', 'cross')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying tool can be run.

        Should be cheap and never raise.
        """

    def ensure_available(self) -> None:
        """Raise ToolNotInstalledError unless the tool is available."""
        if not self.is_available():
            raise ToolNotInstalledError(self.name, self.install_hint)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
