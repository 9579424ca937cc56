"""APK container writing — the packaging capability the pipeline drives."""

from oribuild.adapters.apk.aapt import AaptContainerWriter, BuildTools, BuildToolsAdapter
from oribuild.adapters.apk.signer import Signer
from oribuild.adapters.apk.writer import ContainerWriter, WriterFactory

__all__ = [
    "AaptContainerWriter",
    "BuildTools",
    "BuildToolsAdapter",
    "ContainerWriter",
    "Signer",
    "WriterFactory",
]
