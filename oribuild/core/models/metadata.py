"""
Tool metadata — the ``[package.metadata.ori]`` and ``[package.metadata.apk]``
tables of a Cargo package.

Both schemas are strict: an unknown key is a validation error, so a
typo like ``version_cde`` fails the build instead of being ignored.
Keys are kebab-case, matching Cargo.toml conventions; the snake_case
attribute names are not accepted as keys.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def _kebab(name: str) -> str:
    return name.replace("_", "-")


_STRICT = ConfigDict(
    extra="forbid",
    alias_generator=_kebab,
    frozen=True,
)


class OriMetadata(BaseModel):
    """General project metadata (``[package.metadata.ori]``)."""

    model_config = _STRICT

    name: str | None = None             # display name / application label


class ApkMetadata(BaseModel):
    """Package-specific metadata (``[package.metadata.apk]``)."""

    model_config = _STRICT

    package: str | None = None          # application id, e.g. com.example.app
    version_code: int | None = Field(default=None, ge=0)
    version_name: str | None = None
    icon: str | None = None             # path relative to the workspace root
    uses_feature: list[str] = Field(default_factory=list)
    uses_permission: list[str] = Field(default_factory=list)
