"""
Container writer contract.

A writer is created for one output path and one manifest, accumulates
content through the ``add_*`` calls, and produces the package on
``finish()``. Calls must be made in order: resources, payload, native
library, finish. ``close()`` follows in every case, including after a
failed step. Any call may raise ``PackagingError``; nothing is written
to the output path before ``finish()`` succeeds.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from oribuild.adapters.apk.signer import Signer
from oribuild.core.models.manifest import AndroidManifest
from oribuild.core.models.target import Target


class ContainerWriter(Protocol):
    def add_resources(self, icon: Path | None, android_jar: Path) -> None:
        """Compile resources (and the icon) against ``android.jar``."""

    def add_binary_payload(self, dex: Path) -> None:
        """Add ``classes.dex``."""

    def add_native_library(self, target: Target, library: Path) -> None:
        """Add a shared library under ``lib/<abi>/``."""

    def finish(self, signer: Signer | None) -> None:
        """Align, optionally sign, and write the package."""

    def close(self) -> None:
        """Release scratch state; called whether or not the package was written."""


class WriterFactory(Protocol):
    def __call__(
        self, path: Path, manifest: AndroidManifest, debuggable: bool
    ) -> ContainerWriter: ...
