"""
Artifact builder — cross-compiles the package and finds its cdylib.

Cargo's ``--message-format=json`` prints one JSON object per line on
stdout. The stream is consumed as it is produced so diagnostics reach
the user while a long build is still running:

    compiler-artifact  for our package → remembered (last one wins)
    compiler-message                   → rendered diagnostic echoed
    other reasons                      → ignored
    non-JSON lines                     → echoed as is

The exit status is only logged. A missing artifact message is what
marks the build as failed.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from pydantic import ValidationError

from oribuild.adapters.cargo import CrossAdapter
from oribuild.core.errors import ArtifactNotGeneratedError, NoSharedLibraryError
from oribuild.core.models.cargo import CargoPackage, CompilerArtifact, CompilerMessage

logger = logging.getLogger(__name__)

SHARED_LIBRARY = "cdylib"

Echo = Callable[[str], None]


def _print(line: str) -> None:
    print(line, flush=True)


def collect_artifact(
    lines: Iterable[str],
    package_id: str,
    echo: Echo = _print,
) -> CompilerArtifact | None:
    """Consume a Cargo JSON message stream, one line at a time.

    Returns:
        The last ``compiler-artifact`` message for ``package_id``, or
        None when the stream produced none.
    """
    artifact: CompilerArtifact | None = None

    for line in lines:
        if not line.strip():
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            echo(line)
            continue
        if not isinstance(message, dict):
            echo(line)
            continue

        reason = message.get("reason")
        try:
            if reason == "compiler-artifact":
                candidate = CompilerArtifact.model_validate(message)
                if candidate.package_id == package_id:
                    artifact = candidate
            elif reason == "compiler-message":
                echo(CompilerMessage.model_validate(message).text.rstrip("\n"))
        except ValidationError as e:
            logger.debug("Skipping malformed %s message: %s", reason, e)

    return artifact


def artifact_cdylib(artifact: CompilerArtifact, package: str = "") -> Path:
    """The shared-library output of ``artifact``.

    ``target.crate_types`` and ``filenames`` are parallel lists.

    Raises:
        NoSharedLibraryError: No cdylib among the artifact's outputs.
    """
    crate_types = artifact.target.crate_types
    if SHARED_LIBRARY not in crate_types:
        raise NoSharedLibraryError(package or artifact.target.name)
    index = crate_types.index(SHARED_LIBRARY)
    if index >= len(artifact.filenames):
        raise NoSharedLibraryError(package or artifact.target.name)
    return artifact.filenames[index]


def host_path(path: Path, workspace_root: Path) -> Path:
    """Map a path reported by the build onto the host filesystem.

    Paths printed from inside the cross container may not exist on the
    host; those are re-rooted under the workspace root.
    """
    if path.exists():
        return path
    if path.is_absolute():
        path = path.relative_to(path.anchor)
    return workspace_root / path


def build_lib(
    cross: CrossAdapter,
    package: CargoPackage,
    triple: str,
    features: Sequence[str] = (),
    release: bool = False,
    offline: bool = False,
    verbose: bool = False,
    echo: Echo = _print,
    cwd: Path | None = None,
) -> CompilerArtifact:
    """Build ``package`` for ``triple`` and return its artifact message.

    Raises:
        ArtifactNotGeneratedError: The build produced no artifact
            message for the package.
    """
    logger.info("Building %s for %s%s", package.name, triple, " (release)" if release else "")

    with cross.build(
        package.name, triple, features,
        release=release, offline=offline, verbose=verbose, cwd=cwd,
    ) as lines:
        artifact = collect_artifact(lines, package.id, echo)

    logger.debug("cross exited with %s", lines.returncode)

    if artifact is None:
        raise ArtifactNotGeneratedError(package.name)
    return artifact
