"""
Tests for the artifact builder — JSON message stream, cdylib lookup, path mapping.
"""

import json
from pathlib import Path

import pytest

from conftest import PACKAGE_ID, FakeCross, artifact_line, diagnostic_line
from oribuild.core.errors import ArtifactNotGeneratedError, BuildError, NoSharedLibraryError
from oribuild.core.services.artifact import (
    artifact_cdylib,
    build_lib,
    collect_artifact,
    host_path,
)


class TestCollectArtifact:
    def test_last_artifact_for_package_wins(self):
        lines = [
            artifact_line(PACKAGE_ID, ["cdylib"], ["/t/first.so"]),
            artifact_line(PACKAGE_ID, ["cdylib"], ["/t/second.so"]),
        ]
        artifact = collect_artifact(lines, PACKAGE_ID, echo=lambda line: None)
        assert artifact.filenames == [Path("/t/second.so")]

    def test_other_packages_ignored(self):
        lines = [
            artifact_line(PACKAGE_ID, ["cdylib"], ["/t/mine.so"]),
            artifact_line("dep 0.1.0", ["lib"], ["/t/libdep.rlib"], name="dep"),
        ]
        artifact = collect_artifact(lines, PACKAGE_ID, echo=lambda line: None)
        assert artifact.filenames == [Path("/t/mine.so")]

    def test_no_artifact(self):
        lines = [json.dumps({"reason": "build-finished", "success": False})]
        assert collect_artifact(lines, PACKAGE_ID, echo=lambda line: None) is None

    def test_diagnostics_echoed_in_order(self):
        echoed = []
        lines = [
            diagnostic_line("warning: first"),
            artifact_line(PACKAGE_ID, ["cdylib"], ["/t/a.so"]),
            diagnostic_line("warning: second"),
        ]
        collect_artifact(lines, PACKAGE_ID, echo=echoed.append)
        assert echoed == ["warning: first", "warning: second"]

    def test_non_json_lines_echoed(self):
        echoed = []
        collect_artifact(["   Compiling my-app v1.2.3", ""], PACKAGE_ID, echo=echoed.append)
        assert echoed == ["   Compiling my-app v1.2.3"]

    def test_other_reasons_ignored(self):
        echoed = []
        lines = [
            json.dumps({"reason": "build-script-executed", "package_id": PACKAGE_ID}),
            json.dumps({"reason": "build-finished", "success": True}),
        ]
        collect_artifact(lines, PACKAGE_ID, echo=echoed.append)
        assert echoed == []

    def test_malformed_artifact_skipped(self):
        lines = [json.dumps({"reason": "compiler-artifact", "package_id": PACKAGE_ID})]
        assert collect_artifact(lines, PACKAGE_ID, echo=lambda line: None) is None


class TestArtifactCdylib:
    def _artifact(self, crate_types, filenames):
        line = artifact_line(PACKAGE_ID, crate_types, filenames)
        return collect_artifact([line], PACKAGE_ID, echo=lambda line: None)

    def test_single_cdylib(self):
        assert artifact_cdylib(self._artifact(["cdylib"], ["/t/libx.so"])) == Path("/t/libx.so")

    def test_picks_matching_index(self):
        artifact = self._artifact(["rlib", "cdylib"], ["/t/libx.rlib", "/t/libx.so"])
        assert artifact_cdylib(artifact) == Path("/t/libx.so")

    def test_no_cdylib(self):
        artifact = self._artifact(["rlib"], ["/t/libx.rlib"])
        with pytest.raises(NoSharedLibraryError, match="my-app"):
            artifact_cdylib(artifact, "my-app")

    def test_no_cdylib_is_not_a_missing_artifact(self):
        artifact = self._artifact(["lib"], ["/t/libx.rlib"])
        with pytest.raises(BuildError) as exc:
            artifact_cdylib(artifact, "my-app")
        assert not isinstance(exc.value, ArtifactNotGeneratedError)

    def test_filenames_shorter_than_crate_types(self):
        artifact = self._artifact(["rlib", "cdylib"], ["/t/libx.rlib"])
        with pytest.raises(NoSharedLibraryError):
            artifact_cdylib(artifact)


class TestHostPath:
    def test_existing_path_unchanged(self, tmp_path: Path):
        lib = tmp_path / "libx.so"
        lib.touch()
        assert host_path(lib, tmp_path / "ws") == lib

    def test_container_path_rerooted(self, tmp_path: Path):
        path = Path("/target/aarch64-linux-android/debug/libx.so")
        assert host_path(path, tmp_path) == tmp_path / "target/aarch64-linux-android/debug/libx.so"

    def test_relative_path(self, tmp_path: Path):
        assert host_path(Path("target/libx.so"), tmp_path) == tmp_path / "target/libx.so"


class TestBuildLib:
    def test_returns_artifact(self, make_package, built_library):
        cross = FakeCross([artifact_line(PACKAGE_ID, ["cdylib"], [str(built_library)])])
        artifact = build_lib(cross, make_package(), "aarch64-linux-android", echo=lambda line: None)
        assert artifact_cdylib(artifact) == built_library

    def test_passes_build_flags(self, make_package):
        cross = FakeCross([artifact_line(PACKAGE_ID, ["cdylib"], ["/t/x.so"])])
        build_lib(
            cross, make_package(), "x86_64-linux-android", ("a", "b"),
            release=True, offline=True, echo=lambda line: None,
        )
        assert cross.calls == [{
            "package": "my-app",
            "triple": "x86_64-linux-android",
            "features": ("a", "b"),
            "release": True,
            "offline": True,
        }]

    def test_missing_artifact(self, make_package):
        cross = FakeCross([diagnostic_line("error: could not compile `my-app`")])
        echoed = []
        with pytest.raises(ArtifactNotGeneratedError, match="my-app"):
            build_lib(cross, make_package(), "aarch64-linux-android", echo=echoed.append)
        assert echoed == ["error: could not compile `my-app`"]
