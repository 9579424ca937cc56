"""
Domain models — Pydantic types for the build pipeline.

All models are re-exported here for convenient access:

    from oribuild.core.models import AndroidManifest, BuildOptions, Device, Target
"""

from oribuild.core.models.cargo import (
    ArtifactTarget,
    CargoPackage,
    CompilerArtifact,
    CompilerMessage,
    Diagnostic,
    WorkspaceMetadata,
)
from oribuild.core.models.device import Device
from oribuild.core.models.manifest import (
    Activity,
    AndroidManifest,
    Application,
    Feature,
    IntentFilter,
    MetaData,
    Permission,
    UsesSdk,
)
from oribuild.core.models.metadata import ApkMetadata, OriMetadata
from oribuild.core.models.options import BuildOptions
from oribuild.core.models.target import SUPPORTED_TRIPLES, Target

__all__ = [
    # manifest.py
    "Activity",
    "AndroidManifest",
    # metadata.py
    "ApkMetadata",
    "Application",
    # cargo.py
    "ArtifactTarget",
    # options.py
    "BuildOptions",
    "CargoPackage",
    "CompilerArtifact",
    "CompilerMessage",
    # device.py
    "Device",
    "Diagnostic",
    "Feature",
    "IntentFilter",
    "MetaData",
    "OriMetadata",
    "Permission",
    # target.py
    "SUPPORTED_TRIPLES",
    "Target",
    "UsesSdk",
    "WorkspaceMetadata",
]
