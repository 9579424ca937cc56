"""ori — build and install Android packages from Cargo projects."""

__version__ = "0.1.0"
