"""
Android manifest model — the synthesized description of the package.

The model mirrors the subset of ``AndroidManifest.xml`` the build
produces. It is plain data: the container writer turns it into XML
and ``aapt2`` encodes that into the binary manifest inside the APK.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UsesSdk(BaseModel):
    min_sdk_version: int
    target_sdk_version: int


class Feature(BaseModel):
    """A ``<uses-feature>`` element."""

    name: str
    required: bool | None = None


class Permission(BaseModel):
    """A ``<uses-permission>`` element."""

    name: str
    max_sdk_version: int | None = None


class MetaData(BaseModel):
    name: str
    value: str


class IntentFilter(BaseModel):
    actions: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)


class Activity(BaseModel):
    """The application entry point."""

    name: str
    label: str
    exported: bool
    hardware_accelerated: bool
    window_soft_input_mode: str
    launch_mode: str
    config_changes: str
    meta_data: list[MetaData] = Field(default_factory=list)
    intent_filters: list[IntentFilter] = Field(default_factory=list)


class Application(BaseModel):
    label: str
    theme: str
    icon: str | None = None             # resource reference, e.g. @mipmap/ic_launcher
    debuggable: bool = False
    has_code: bool = True
    activities: list[Activity] = Field(default_factory=list)


class AndroidManifest(BaseModel):
    """Root ``<manifest>`` element."""

    package: str
    version_code: int
    version_name: str
    compile_sdk_version: int
    compile_sdk_version_codename: int
    platform_build_version_code: int
    platform_build_version_name: int
    sdk: UsesSdk
    uses_feature: list[Feature] = Field(default_factory=list)
    uses_permission: list[Permission] = Field(default_factory=list)
    application: Application

    @property
    def main_activity(self) -> Activity:
        return self.application.activities[0]
