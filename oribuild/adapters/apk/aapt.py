"""
Container writer backed by the Android SDK build-tools.

    aapt2 compile / link   resources + binary manifest → unaligned.apk
    zipfile                classes.dex, lib/<abi>/lib<name>.so
    zipalign -p 4          page-align stored entries
    apksigner sign         v1/v2/v3 signatures

Work happens in a scratch directory next to the output; the final
path is only written by an atomic rename at the end of ``finish()``.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path

from oribuild.adapters.apk.manifest_xml import render_manifest
from oribuild.adapters.apk.signer import Signer
from oribuild.adapters.base import ToolAdapter
from oribuild.adapters.shell.command import run_command
from oribuild.core.errors import PackagingError, ToolNotInstalledError
from oribuild.core.models.manifest import AndroidManifest
from oribuild.core.models.target import Target

logger = logging.getLogger(__name__)

BUILD_TOOLS_HINT = "install Android SDK build-tools (sdkmanager 'build-tools;34.0.0') and set ANDROID_HOME or pass --sdk"

ICON_RESOURCE = "ic_launcher"


def _version_key(name: str) -> tuple[int, ...]:
    parts = []
    for piece in name.split("-")[0].split("."):
        parts.append(int(piece) if piece.isdigit() else -1)
    return tuple(parts)


def sdk_roots(sdk: Path | None = None) -> list[Path]:
    """Candidate SDK roots: the explicit override, else the env vars."""
    if sdk is not None:
        return [sdk]
    roots = []
    for var in ("ANDROID_HOME", "ANDROID_SDK_ROOT"):
        value = os.environ.get(var)
        if value:
            roots.append(Path(value))
    return roots


@dataclass(frozen=True)
class BuildTools:
    """Paths to the build-tools executables."""

    aapt2: Path
    zipalign: Path
    apksigner: Path

    @classmethod
    def locate(cls, sdk: Path | None = None) -> BuildTools:
        """Find the newest build-tools under the SDK root, else on PATH.

        Raises:
            ToolNotInstalledError: A tool is in neither place.
        """
        search_dirs: list[Path] = []
        for root in sdk_roots(sdk):
            build_tools = root / "build-tools"
            if build_tools.is_dir():
                versions = sorted(
                    (d for d in build_tools.iterdir() if d.is_dir()),
                    key=lambda d: _version_key(d.name),
                    reverse=True,
                )
                search_dirs.extend(versions)

        found: dict[str, Path] = {}
        for tool in ("aapt2", "zipalign", "apksigner"):
            path = None
            for directory in search_dirs:
                path = shutil.which(tool, path=str(directory))
                if path:
                    break
            path = path or shutil.which(tool)
            if not path:
                raise ToolNotInstalledError(tool, BUILD_TOOLS_HINT)
            found[tool] = Path(path)

        logger.debug("Using build-tools %s", found)
        return cls(**found)


class BuildToolsAdapter(ToolAdapter):
    install_hint = BUILD_TOOLS_HINT

    def __init__(self, sdk: Path | None = None):
        self.sdk = sdk

    @property
    def name(self) -> str:
        return "build-tools"

    def is_available(self) -> bool:
        try:
            BuildTools.locate(self.sdk)
        except ToolNotInstalledError:
            return False
        return True

    def writer_factory(self):
        """Return a WriterFactory bound to the located build-tools."""
        tools = BuildTools.locate(self.sdk)

        def factory(path: Path, manifest: AndroidManifest, debuggable: bool) -> AaptContainerWriter:
            return AaptContainerWriter(path, manifest, debuggable, tools)

        return factory


class AaptContainerWriter:
    """Builds one APK with aapt2, zipalign and apksigner."""

    def __init__(self, path: Path, manifest: AndroidManifest, debuggable: bool, tools: BuildTools):
        self.path = path
        self.tools = tools

        manifest = manifest.model_copy(deep=True)
        manifest.application.debuggable = debuggable
        self.manifest = manifest

        path.parent.mkdir(parents=True, exist_ok=True)
        self._workdir = Path(tempfile.mkdtemp(prefix=f".{path.stem}-", dir=path.parent))
        self._manifest_xml = self._workdir / "AndroidManifest.xml"
        self._manifest_xml.write_text(render_manifest(manifest), encoding="utf-8")
        self._unaligned = self._workdir / "unaligned.apk"

    def _run(self, cmd: list[str]) -> None:
        result = run_command(cmd)
        if result.returncode != 0:
            tool = Path(cmd[0]).name
            detail = (result.stderr or result.stdout).strip()
            raise PackagingError(f"{tool} failed (exit {result.returncode}): {detail}")

    def _append(self, source: Path, arcname: str, compress_type: int) -> None:
        if not self._unaligned.is_file():
            raise PackagingError("Resources must be added before other content")
        if not source.is_file():
            raise PackagingError(f"File not found: {source}")
        with zipfile.ZipFile(self._unaligned, "a") as apk:
            apk.write(source, arcname=arcname, compress_type=compress_type)
        logger.debug("Added %s as %s", source, arcname)

    def add_resources(self, icon: Path | None, android_jar: Path) -> None:
        if not android_jar.is_file():
            raise PackagingError(f"android.jar not found: {android_jar}")

        compiled: list[str] = []
        if icon is not None:
            if not icon.is_file():
                raise PackagingError(f"Icon not found: {icon}")
            res = self._workdir / "res" / "mipmap"
            res.mkdir(parents=True)
            shutil.copyfile(icon, res / f"{ICON_RESOURCE}{icon.suffix.lower()}")
            res_zip = self._workdir / "res.zip"
            self._run([
                str(self.tools.aapt2), "compile",
                "--dir", str(self._workdir / "res"),
                "-o", str(res_zip),
            ])
            compiled.append(str(res_zip))

        self._run([
            str(self.tools.aapt2), "link",
            "-I", str(android_jar),
            "--manifest", str(self._manifest_xml),
            "-o", str(self._unaligned),
            *compiled,
        ])

    def add_binary_payload(self, dex: Path) -> None:
        self._append(dex, "classes.dex", zipfile.ZIP_DEFLATED)

    def add_native_library(self, target: Target, library: Path) -> None:
        # Stored, so zipalign -p can page-align it for direct mmap.
        self._append(library, f"{target.lib_dir}/{library.name}", zipfile.ZIP_STORED)

    def finish(self, signer: Signer | None) -> None:
        try:
            aligned = self._workdir / "aligned.apk"
            self._run([
                str(self.tools.zipalign), "-p", "-f", "4",
                str(self._unaligned), str(aligned),
            ])

            output = aligned
            if signer is not None:
                key, cert = signer.write_to(self._workdir)
                output = self._workdir / "signed.apk"
                self._run([
                    str(self.tools.apksigner), "sign",
                    "--key", str(key),
                    "--cert", str(cert),
                    "--out", str(output),
                    str(aligned),
                ])

            os.replace(output, self.path)
            logger.info("Wrote %s", self.path)
        finally:
            self.close()

    def close(self) -> None:
        """Remove the scratch directory. Safe to call more than once."""
        shutil.rmtree(self._workdir, ignore_errors=True)
