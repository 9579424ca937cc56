"""
Configuration loader — reads ori.yml build defaults.

``ori.yml`` is optional. When present (in the working directory or any
parent) it supplies defaults for build flags so a project can pin its
target, features and signing key:

    build:
      target: aarch64-linux-android
      features: [vulkan]
      release: false
      pem: keys/release.pem
      sdk: /opt/android-sdk

Command-line flags always win over the file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from oribuild.core.errors import ConfigError
from oribuild.core.models.options import BuildOptions

logger = logging.getLogger(__name__)

# Default config filename
PROJECT_CONFIG_FILE = "ori.yml"


class BuildDefaults(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target: str | None = None
    features: list[str] = Field(default_factory=list)
    release: bool = False
    offline: bool = False
    pem: Path | None = None
    sdk: Path | None = None


class OriConfig(BaseModel):
    """Root of ori.yml."""

    model_config = ConfigDict(extra="forbid")

    build: BuildDefaults = Field(default_factory=BuildDefaults)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for ori.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to ori.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PROJECT_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> OriConfig:
    """Load and validate ori.yml.

    Args:
        path: Explicit path to ori.yml. If None, searches upward; a
            missing file yields the empty config.

    Returns:
        Validated OriConfig, with relative paths resolved against the
        file's directory.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            return OriConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = OriConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration in {path}: {e}") from e

    base = path.parent.resolve()
    build = config.build
    updates: dict[str, Any] = {}
    if build.pem is not None and not build.pem.is_absolute():
        updates["pem"] = base / build.pem
    if build.sdk is not None and not build.sdk.is_absolute():
        updates["sdk"] = base / build.sdk
    if updates:
        config = OriConfig(build=build.model_copy(update=updates))

    return config


def merge_options(config: OriConfig, **flags: Any) -> BuildOptions:
    """Combine ori.yml defaults with command-line flags.

    A flag that was given (not None, not False, not empty) replaces the
    config value; boolean switches can only turn a setting on.
    """
    defaults = config.build
    values: dict[str, Any] = {
        "target": defaults.target,
        "features": tuple(defaults.features),
        "release": defaults.release,
        "offline": defaults.offline,
        "pem": defaults.pem,
        "sdk": defaults.sdk,
    }

    for key, value in flags.items():
        if value is None or value is False or value == () or value == []:
            values.setdefault(key, value)
            continue
        values[key] = tuple(value) if key == "features" else value

    return BuildOptions(**{k: v for k, v in values.items() if v is not None})
