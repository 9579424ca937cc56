"""
Error taxonomy — every failure the build pipeline can raise.

A run is all-or-nothing: the first error aborts the workflow and
surfaces at the CLI as a single red line and exit code 1.

    OriError
    ├── ConfigError            bad metadata, bad target string, bad ABI
    ├── HostEnvironmentError   missing tools, offline SDK, download failure
    ├── BuildError             no artifact, no shared library
    ├── DeviceSelectionError   zero / many / unknown devices
    ├── PackagingError         container writer or signing failure
    └── InstallError           adb install exited non-zero
"""

from __future__ import annotations


class OriError(Exception):
    """Base class for every error raised by the build pipeline."""


# ── Configuration ───────────────────────────────────────────────


class ConfigError(OriError):
    """Raised when configuration is invalid or missing."""


class MetadataError(ConfigError):
    """A ``[package.metadata.*]`` table failed validation."""


class UnsupportedTargetError(ConfigError):
    """The target triple is not one of the supported Android triples."""

    def __init__(self, triple: str):
        super().__init__(f"Target '{triple}' is not supported for android")
        self.triple = triple


class UnknownAbiError(ConfigError):
    """A device reported an ABI string outside the supported set."""

    def __init__(self, abi: str):
        super().__init__(f"Unknown abi `{abi}`")
        self.abi = abi


class TargetNotSpecifiedError(ConfigError):
    def __init__(self) -> None:
        super().__init__("Target not specified, use `--target` to do so")


class PackageNotFoundError(ConfigError):
    """The requested Cargo package is not part of the workspace."""


# ── Host environment ────────────────────────────────────────────


class HostEnvironmentError(OriError):
    """Raised when the host is missing something the build needs."""


class ToolNotInstalledError(HostEnvironmentError):
    """A required external tool is not on the host."""

    def __init__(self, tool: str, hint: str = ""):
        super().__init__(f"`{tool}` is not installed")
        self.tool = tool
        self.hint = hint


class WorkspaceMetadataError(HostEnvironmentError):
    """``cargo metadata`` failed or produced unreadable output."""


class SdkOfflineError(HostEnvironmentError):
    """The SDK resource is not cached and the network is off limits."""

    def __init__(self, path: object):
        super().__init__(
            f"Target SDK resource missing, offline: {path} "
            "(run once without --offline to download it)"
        )
        self.path = path


class SdkDownloadError(HostEnvironmentError):
    """The SDK repository could not be read or the archive was bad."""


# ── Build ───────────────────────────────────────────────────────


class BuildError(OriError):
    """Raised when the native library could not be produced."""


class ArtifactNotGeneratedError(BuildError):
    def __init__(self, package: str):
        super().__init__(f"Artifact not generated for package `{package}`")
        self.package = package


class NoSharedLibraryError(BuildError):
    def __init__(self, package: str):
        super().__init__(
            f"No cdylib built for package `{package}`, "
            'add `crate-type = ["cdylib"]` to its [lib] section'
        )
        self.package = package


# ── Device selection ────────────────────────────────────────────


class DeviceSelectionError(OriError):
    """Raised when exactly one device cannot be chosen."""


class NoDeviceError(DeviceSelectionError):
    def __init__(self) -> None:
        super().__init__("No device connected")


class AmbiguousDeviceError(DeviceSelectionError):
    def __init__(self, count: int):
        super().__init__(f"{count} devices connected, select one with `--device`")
        self.count = count


class DeviceNotFoundError(DeviceSelectionError):
    def __init__(self, device_id: str, available: list[str]):
        listed = ", ".join(available) if available else "none"
        super().__init__(f"Device `{device_id}` not found (connected: {listed})")
        self.device_id = device_id
        self.available = available


# ── Packaging / install ─────────────────────────────────────────


class PackagingError(OriError):
    """A container writer step failed."""


class SigningError(PackagingError):
    """The signing key or certificate could not be loaded."""


class InstallError(OriError):
    """``adb install`` reported failure."""
