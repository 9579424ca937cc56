"""
Metadata resolver — reads tool metadata tables off a Cargo package.

An absent table yields the all-default model. A present table is
validated field by field on top of those defaults, so declaring one
key never clears another.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from oribuild.core.errors import MetadataError
from oribuild.core.models.cargo import CargoPackage
from oribuild.core.models.metadata import ApkMetadata, OriMetadata

logger = logging.getLogger(__name__)

ORI_METADATA_KEY = "ori"
APK_METADATA_KEY = "apk"

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")


def load_metadata(package: CargoPackage, key: str, model: type[M]) -> M:
    """Validate ``[package.metadata.<key>]`` into ``model``.

    Raises:
        MetadataError: The table is not a mapping or has unknown or
            mistyped keys. The message names the offending keys.
    """
    raw = package.tool_metadata(key)
    if raw is None:
        return model()

    if not isinstance(raw, dict):
        raise MetadataError(
            f"[package.metadata.{key}] in {package.name} must be a table, "
            f"got {type(raw).__name__}"
        )

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise MetadataError(
            f"Invalid [package.metadata.{key}] in {package.name}: {problems}"
        ) from e


def ori_metadata(package: CargoPackage) -> OriMetadata:
    return load_metadata(package, ORI_METADATA_KEY, OriMetadata)


def apk_metadata(package: CargoPackage) -> ApkMetadata:
    return load_metadata(package, APK_METADATA_KEY, ApkMetadata)


def resolve_field(*candidates: T | None, default: T) -> T:
    """First candidate that is set, else ``default``.

    Candidates are given most specific first (package metadata, then
    general metadata). Empty strings count as unset.
    """
    for value in candidates:
        if value is None or value == "":
            continue
        return value
    return default
