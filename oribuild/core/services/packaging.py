"""
Package assembler — drives a container writer through one APK.

Order is fixed: resources, classes.dex, native library, finish. The
writer is owned by ``assemble()`` for its whole life; the first step
that fails aborts the rest and the writer is closed either way.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path

from oribuild.adapters.apk.signer import Signer
from oribuild.adapters.apk.writer import WriterFactory
from oribuild.core.errors import PackagingError
from oribuild.core.models.manifest import AndroidManifest
from oribuild.core.models.target import Target

logger = logging.getLogger(__name__)

CLASSES_DEX = "classes.dex"


def bundled_dex() -> bytes:
    """The ori Android runtime (OriActivity) compiled to DEX.

    Built from ``android/`` by ``android/build_dex.sh`` and shipped
    inside the package.
    """
    dex = resources.files("oribuild").joinpath("data", CLASSES_DEX)
    if not dex.is_file():
        raise PackagingError(
            f"Bundled {CLASSES_DEX} is missing; run android/build_dex.sh to build it"
        )
    return dex.read_bytes()


def write_dex(directory: Path) -> Path:
    """Write the bundled classes.dex into ``directory``."""
    path = directory / CLASSES_DEX
    try:
        path.write_bytes(bundled_dex())
    except OSError as e:
        raise PackagingError(f"Failed to write {CLASSES_DEX}: {e}") from e
    return path


def load_signer(pem: Path | None) -> Signer:
    """Signer from ``pem``, or the bundled development key."""
    if pem is None:
        logger.info("Signing with the bundled debug key")
        return Signer.debug()
    return Signer.from_file(pem)


def assemble(
    writer_factory: WriterFactory,
    apk_path: Path,
    manifest: AndroidManifest,
    android_jar: Path,
    dex: Path,
    target: Target,
    library: Path,
    icon: Path | None = None,
    signer: Signer | None = None,
    debuggable: bool = True,
) -> Path:
    """Write the APK at ``apk_path``.

    Raises:
        PackagingError: Any writer step failed.
    """
    logger.info("Packaging %s", apk_path)

    try:
        writer = writer_factory(apk_path, manifest, debuggable)
    except OSError as e:
        raise PackagingError(f"Failed to write {apk_path}: {e}") from e

    try:
        writer.add_resources(icon, android_jar)
        writer.add_binary_payload(dex)
        writer.add_native_library(target, library)
        writer.finish(signer)
    except OSError as e:
        raise PackagingError(f"Failed to write {apk_path}: {e}") from e
    finally:
        writer.close()

    return apk_path
