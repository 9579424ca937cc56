"""
Shared test fixtures and test doubles.

The doubles subclass the real adapters so they pass the registry's
type checks, and replace every subprocess with canned data.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from types import SimpleNamespace

import pytest

from oribuild.adapters.adb import AdbAdapter
from oribuild.adapters.apk.aapt import BuildToolsAdapter
from oribuild.adapters.cargo import CargoAdapter, CrossAdapter
from oribuild.adapters.registry import AdapterRegistry
from oribuild.core.models.cargo import CargoPackage, WorkspaceMetadata

PACKAGE_ID = "path+file:///ws/my-app#my-app@1.2.3"
HEADER_LINE = "List of devices attached\n"


# ── Message stream helpers ──────────────────────────────────────


def artifact_line(package_id: str, crate_types: list[str], filenames: list[str], name: str = "my_app") -> str:
    return json.dumps({
        "reason": "compiler-artifact",
        "package_id": package_id,
        "target": {"name": name, "kind": crate_types, "crate_types": crate_types},
        "filenames": filenames,
        "fresh": False,
    })


def diagnostic_line(rendered: str) -> str:
    return json.dumps({
        "reason": "compiler-message",
        "package_id": PACKAGE_ID,
        "message": {"message": rendered.split(":")[0], "level": "warning", "rendered": rendered + "\n"},
    })


# ── Doubles ─────────────────────────────────────────────────────


class FakeStream(list):
    returncode = 0


class FakeCargo(CargoAdapter):
    def __init__(self, workspace: WorkspaceMetadata):
        self.workspace = workspace
        self.manifest_paths: list[Path | None] = []

    def is_available(self) -> bool:
        return True

    def metadata(self, manifest_path: Path | None = None) -> WorkspaceMetadata:
        self.manifest_paths.append(manifest_path)
        return self.workspace


class FakeCross(CrossAdapter):
    def __init__(self, lines: list[str], available: bool = True):
        self.lines = lines
        self.available = available
        self.calls: list[dict] = []

    def is_available(self) -> bool:
        return self.available

    @contextmanager
    def build(self, package, triple, features=(), release=False, offline=False, verbose=False, cwd=None):
        self.calls.append({
            "package": package,
            "triple": triple,
            "features": tuple(features),
            "release": release,
            "offline": offline,
        })
        yield FakeStream(self.lines)


class FakeAdb(AdbAdapter):
    def __init__(self, devices_output: str, abis: dict[str, str], install_code: int = 0):
        self.devices_output = devices_output
        self.abis = abis
        self.install_code = install_code
        self.installed: list[tuple[str, Path]] = []

    def is_available(self) -> bool:
        return True

    def devices(self) -> str:
        return self.devices_output

    def getprop(self, device_id: str, key: str) -> str:
        return self.abis[device_id]

    def install(self, device_id: str, apk_path: Path):
        self.installed.append((device_id, apk_path))
        return SimpleNamespace(
            returncode=self.install_code,
            stdout="" if self.install_code == 0 else "Failure [INSTALL_FAILED_NO_MATCHING_ABIS]",
            stderr="",
        )


class RecordingWriter:
    """Container writer that records the calls made on it."""

    def __init__(self, log: list, path: Path, manifest, debuggable: bool, fail_on: str | None = None):
        self.log = log
        self.path = path
        self.fail_on = fail_on
        log.append(("new", path, manifest.package, debuggable))

    def _step(self, name: str, *args) -> None:
        if self.fail_on == name:
            from oribuild.core.errors import PackagingError

            raise PackagingError(f"{name} failed")
        self.log.append((name, *args))

    def add_resources(self, icon, android_jar):
        self._step("add_resources", icon, android_jar)

    def add_binary_payload(self, dex):
        self._step("add_binary_payload", dex)

    def add_native_library(self, target, library):
        self._step("add_native_library", target, library)

    def finish(self, signer):
        self._step("finish", signer)
        self.path.write_bytes(b"PK\x05\x06" + b"\x00" * 18)

    def close(self):
        self.log.append(("close",))


class FakeBuildTools(BuildToolsAdapter):
    def __init__(self, fail_on: str | None = None):
        super().__init__(None)
        self.log: list = []
        self.fail_on = fail_on

    def is_available(self) -> bool:
        return True

    def writer_factory(self):
        def factory(path, manifest, debuggable):
            return RecordingWriter(self.log, path, manifest, debuggable, self.fail_on)

        return factory


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "my-app"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "my-app"\nversion = "1.2.3"\n')
    return root


@pytest.fixture
def make_package(workspace_root: Path):
    def _make(metadata: dict | None = None, name: str = "my-app", version: str = "1.2.3") -> CargoPackage:
        return CargoPackage(
            id=PACKAGE_ID,
            name=name,
            version=version,
            manifest_path=workspace_root / "Cargo.toml",
            metadata=metadata,
        )

    return _make


@pytest.fixture
def workspace(workspace_root: Path, make_package) -> WorkspaceMetadata:
    return WorkspaceMetadata(
        packages=[make_package()],
        workspace_root=workspace_root,
        target_directory=workspace_root / "target",
    )


@pytest.fixture
def built_library(workspace: WorkspaceMetadata) -> Path:
    """A cdylib where cross would have left it."""
    lib = workspace.target_directory / "aarch64-linux-android" / "debug" / "libmy_app.so"
    lib.parent.mkdir(parents=True)
    lib.write_bytes(b"\x7fELF")
    return lib


@pytest.fixture
def cached_sdk(workspace: WorkspaceMetadata) -> Path:
    jar = workspace.target_directory / "apk" / "platforms" / "android-34" / "android.jar"
    jar.parent.mkdir(parents=True)
    jar.write_bytes(b"PK")
    return jar


@pytest.fixture
def make_registry(workspace: WorkspaceMetadata, built_library: Path):
    def _make(
        cross_lines: list[str] | None = None,
        adb: AdbAdapter | None = None,
        build_tools: FakeBuildTools | None = None,
        cross_available: bool = True,
    ) -> AdapterRegistry:
        if cross_lines is None:
            cross_lines = [artifact_line(PACKAGE_ID, ["cdylib"], [str(built_library)])]
        registry = AdapterRegistry()
        registry.register(FakeCargo(workspace))
        registry.register(FakeCross(cross_lines, available=cross_available))
        registry.register(adb or FakeAdb(HEADER_LINE, {}))
        registry.register(build_tools or FakeBuildTools())
        return registry

    return _make
