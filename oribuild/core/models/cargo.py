"""
Cargo models — workspace metadata and the JSON build message stream.

``cargo metadata --format-version 1`` and ``cargo build
--message-format=json`` both emit far more fields than the pipeline
needs; these models keep the ones it reads and ignore the rest.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field


class CargoPackage(BaseModel):
    """A package entry from ``cargo metadata``."""

    id: str
    name: str
    version: str
    manifest_path: Path
    metadata: dict[str, Any] | None = None

    def tool_metadata(self, key: str) -> Any | None:
        """Return ``[package.metadata.<key>]``, or None when absent."""
        if not self.metadata:
            return None
        return self.metadata.get(key)


class WorkspaceMetadata(BaseModel):
    """Output of ``cargo metadata`` (only the fields the build uses)."""

    packages: list[CargoPackage] = Field(default_factory=list)
    workspace_root: Path
    target_directory: Path

    def find_package(self, name: str) -> CargoPackage | None:
        for package in self.packages:
            if package.name == name:
                return package
        return None

    def root_package(self, manifest_path: Path | None = None) -> CargoPackage | None:
        """The package whose Cargo.toml is the selected manifest.

        Without an explicit manifest the workspace root manifest is
        used. A virtual workspace has no root package.
        """
        wanted = (manifest_path or self.workspace_root / "Cargo.toml").resolve()
        for package in self.packages:
            if package.manifest_path.resolve() == wanted:
                return package
        return None


# ── Build messages ──────────────────────────────────────────────


class ArtifactTarget(BaseModel):
    name: str
    kind: list[str] = Field(default_factory=list)
    crate_types: list[str] = Field(default_factory=list)


class CompilerArtifact(BaseModel):
    """A ``compiler-artifact`` message: one compiled target."""

    reason: Literal["compiler-artifact"] = "compiler-artifact"
    package_id: str
    target: ArtifactTarget
    filenames: list[Path] = Field(default_factory=list)
    fresh: bool = False


class Diagnostic(BaseModel):
    message: str = ""
    level: str = ""
    rendered: str | None = None


class CompilerMessage(BaseModel):
    """A ``compiler-message`` message: one rustc diagnostic."""

    reason: Literal["compiler-message"] = "compiler-message"
    package_id: str = ""
    message: Diagnostic

    @property
    def text(self) -> str:
        return self.message.rendered or self.message.message
