"""
APK use cases — the build and install workflows.

    build:    probe tools → workspace → metadata → manifest → target
              → cross build → android.jar → package → APK path
    install:  probe adb → devices → pick one (and its target)
              → build → adb install

Both are single-pass and fail fast: the first error propagates to the
caller and nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from oribuild.adapters.adb import AdbAdapter
from oribuild.adapters.apk.aapt import BuildToolsAdapter
from oribuild.adapters.cargo import CargoAdapter, CrossAdapter
from oribuild.adapters.registry import AdapterRegistry, default_registry
from oribuild.adapters.sdk_repository import SdkRepository
from oribuild.core.config.metadata import apk_metadata, ori_metadata
from oribuild.core.errors import (
    InstallError,
    PackageNotFoundError,
    TargetNotSpecifiedError,
)
from oribuild.core.models.cargo import CargoPackage, WorkspaceMetadata
from oribuild.core.models.device import Device
from oribuild.core.models.manifest import AndroidManifest
from oribuild.core.models.metadata import ApkMetadata, OriMetadata
from oribuild.core.models.options import BuildOptions
from oribuild.core.models.target import Target
from oribuild.core.services.artifact import Echo, artifact_cdylib, build_lib, host_path
from oribuild.core.services.devices import list_devices, select_device
from oribuild.core.services.manifest import synthesize
from oribuild.core.services.packaging import assemble, load_signer, write_dex
from oribuild.core.services.sdk import PLATFORM_VERSION, ensure_sdk

logger = logging.getLogger(__name__)


@dataclass
class PackageContext:
    """A selected Cargo package and its resolved tool metadata."""

    workspace: WorkspaceMetadata
    package: CargoPackage
    ori: OriMetadata
    apk: ApkMetadata
    manifest: AndroidManifest

    @property
    def icon_path(self) -> Path | None:
        if self.apk.icon is None:
            return None
        return self.workspace.workspace_root / self.apk.icon


@dataclass
class BuildResult:
    """Outcome of a successful build (and install)."""

    apk_path: Path
    package: str
    target: Target
    manifest: AndroidManifest
    device: Device | None = None

    def to_dict(self) -> dict:
        result: dict = {
            "apk": str(self.apk_path),
            "package": self.package,
            "application_id": self.manifest.package,
            "version_code": self.manifest.version_code,
            "version_name": self.manifest.version_name,
            "target": self.target.triple,
            "abi": self.target.abi,
        }
        if self.device is not None:
            result["device"] = self.device.id
        return result


def select_package(
    workspace: WorkspaceMetadata,
    name: str | None = None,
    manifest_path: Path | None = None,
) -> CargoPackage:
    """The package named ``name``, else the root package."""
    if name is not None:
        package = workspace.find_package(name)
        if package is None:
            raise PackageNotFoundError(f"Package `{name}` not found")
        return package

    package = workspace.root_package(manifest_path)
    if package is None:
        raise PackageNotFoundError("No root package, select one with `--package`")
    return package


def resolve_target(options: BuildOptions, device: Device | None = None) -> Target:
    """Explicit ``--target`` wins, then the selected device's ABI."""
    if options.target is not None:
        target = Target.from_triple(options.target)
        if device is not None and device.target != target:
            logger.warning(
                "Building for %s but device %s is %s",
                target.triple, device.id, device.target.abi,
            )
        return target
    if device is not None:
        return device.target
    raise TargetNotSpecifiedError()


def load_package(
    options: BuildOptions,
    registry: AdapterRegistry,
) -> PackageContext:
    """Read workspace metadata and synthesize the package's manifest."""
    cargo = registry.require("cargo", CargoAdapter)
    cargo.ensure_available()

    workspace = cargo.metadata(options.manifest_path)
    package = select_package(workspace, options.package, options.manifest_path)

    ori = ori_metadata(package)
    apk = apk_metadata(package)
    manifest = synthesize(package, ori, apk, debuggable=not options.release)
    return PackageContext(workspace, package, ori, apk, manifest)


def build_apk(
    options: BuildOptions,
    registry: AdapterRegistry | None = None,
    repository: SdkRepository | None = None,
    echo: Echo | None = None,
    device: Device | None = None,
) -> BuildResult:
    """Build a signed APK for the selected package.

    Raises:
        OriError: The first failing step's error.
    """
    registry = registry or default_registry(options.sdk)

    cross = registry.require("cross", CrossAdapter)
    cross.ensure_available()
    writer_factory = registry.require("build-tools", BuildToolsAdapter).writer_factory()

    ctx = load_package(options, registry)
    target = resolve_target(options, device)

    build_kwargs = {"echo": echo} if echo is not None else {}
    artifact = build_lib(
        cross,
        ctx.package,
        target.triple,
        options.features,
        release=options.release,
        offline=options.offline,
        verbose=options.verbose,
        cwd=ctx.workspace.workspace_root,
        **build_kwargs,
    )
    library = host_path(artifact_cdylib(artifact, ctx.package.name), ctx.workspace.workspace_root)

    android_jar = ensure_sdk(
        ctx.workspace.target_directory,
        PLATFORM_VERSION,
        offline=options.offline,
        repository=repository,
    )
    dex = write_dex(android_jar.parent)

    apk_path = assemble(
        writer_factory,
        library.parent / f"{ctx.package.name}.apk",
        ctx.manifest,
        android_jar,
        dex,
        target,
        library,
        icon=ctx.icon_path,
        signer=load_signer(options.pem),
        debuggable=not options.release,
    )

    return BuildResult(
        apk_path=apk_path,
        package=ctx.package.name,
        target=target,
        manifest=ctx.manifest,
        device=device,
    )


def install_apk(
    options: BuildOptions,
    registry: AdapterRegistry | None = None,
    repository: SdkRepository | None = None,
    echo: Echo | None = None,
) -> BuildResult:
    """Build the APK and install it on the single attached device.

    Raises:
        DeviceSelectionError: Zero, several, or an unknown device.
        InstallError: ``adb install`` exited non-zero.
    """
    registry = registry or default_registry(options.sdk)
    adb = registry.require("adb", AdbAdapter)

    device = select_device(list_devices(adb), options.device)
    logger.info("Selected device %s (%s)", device.id, device.target.abi)
    if options.target is None:
        options = options.with_target(device.target_triple)

    result = build_apk(options, registry, repository, echo, device=device)

    installed = adb.install(device.id, result.apk_path)
    if installed.returncode != 0:
        detail = (installed.stderr or installed.stdout).strip()
        raise InstallError(f"Install failed on {device.id}: {detail or installed.returncode}")

    return result
