"""
Build options — the immutable bundle of flags one invocation runs with.

Every field has a default, so ``BuildOptions()`` is a valid build as
long as a target can be inferred (install flow) or comes from ``ori.yml``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BuildOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    sdk: Path | None = None             # Android SDK root override
    release: bool = False
    pem: Path | None = None             # PEM key + certificate for signing
    target: str | None = None           # Rust target triple
    package: str | None = None          # Cargo package to build
    offline: bool = False
    features: tuple[str, ...] = Field(default_factory=tuple)
    verbose: bool = False
    manifest_path: Path | None = None   # Cargo.toml to read metadata from
    device: str | None = None           # adb device id (install only)

    def with_target(self, triple: str) -> BuildOptions:
        """Return a copy with ``target`` set."""
        return self.model_copy(update={"target": triple})
