"""
Cargo and cross adapters.

``cargo metadata`` describes the workspace (packages, their metadata
tables, the target directory). ``cross`` is a drop-in ``cargo`` that
builds inside a container holding the Android NDK; it is what
actually compiles the native library.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError

from oribuild.adapters.base import ToolAdapter
from oribuild.adapters.shell.command import LineStream, probe, run_command, stream_command
from oribuild.core.errors import HostEnvironmentError, WorkspaceMetadataError
from oribuild.core.models.cargo import WorkspaceMetadata

logger = logging.getLogger(__name__)

CROSS_GIT_URL = "https://github.com/cross-rs/cross"


class CargoAdapter(ToolAdapter):
    """Reads workspace metadata through ``cargo metadata``."""

    install_hint = "install Rust from https://rustup.rs"

    @property
    def name(self) -> str:
        return "cargo"

    def is_available(self) -> bool:
        return probe(["cargo", "--version"])

    def metadata(self, manifest_path: Path | None = None) -> WorkspaceMetadata:
        """Run ``cargo metadata`` and parse the workspace description.

        Raises:
            WorkspaceMetadataError: cargo failed or printed something
                that is not workspace metadata.
        """
        cmd = ["cargo", "metadata", "--format-version", "1", "--no-deps"]
        if manifest_path is not None:
            cmd += ["--manifest-path", str(manifest_path)]

        result = run_command(cmd)
        if result.returncode != 0:
            raise WorkspaceMetadataError(
                f"Failed to get cargo metadata: {result.stderr.strip() or result.returncode}"
            )

        try:
            return WorkspaceMetadata.model_validate(json.loads(result.stdout))
        except (json.JSONDecodeError, ValidationError) as e:
            raise WorkspaceMetadataError(f"Unreadable cargo metadata: {e}") from e


class CrossAdapter(ToolAdapter):
    """Cross-compiles Cargo packages for Android targets."""

    install_hint = f"cargo install cross --git {CROSS_GIT_URL}"

    @property
    def name(self) -> str:
        return "cross"

    def is_available(self) -> bool:
        return probe(["cross", "--version"])

    def install(self) -> None:
        """Install cross from git with cargo."""
        result = run_command(
            ["cargo", "--color", "always", "install", "cross", "--git", CROSS_GIT_URL]
        )
        if result.returncode != 0:
            raise HostEnvironmentError("`cross` could not be installed")
        logger.info("Installed cross from %s", CROSS_GIT_URL)

    def build_command(
        self,
        package: str,
        triple: str,
        features: Sequence[str] = (),
        release: bool = False,
        offline: bool = False,
        verbose: bool = False,
    ) -> list[str]:
        cmd = [
            "cross",
            "--color", "always",
            "build",
            "--target", triple,
            "--message-format=json",
            "--package", package,
            "--lib",
        ]
        if release:
            cmd.append("--release")
        if offline:
            cmd.append("--offline")
        if features:
            cmd += ["--features", ",".join(features)]
        if verbose:
            cmd.append("--verbose")
        return cmd

    @contextmanager
    def build(
        self,
        package: str,
        triple: str,
        features: Sequence[str] = (),
        release: bool = False,
        offline: bool = False,
        verbose: bool = False,
        cwd: Path | None = None,
    ) -> Iterator[LineStream]:
        """Start a build and yield its JSON message stream, line by line."""
        cmd = self.build_command(package, triple, features, release, offline, verbose)
        with stream_command(cmd, cwd=cwd) as lines:
            yield lines
