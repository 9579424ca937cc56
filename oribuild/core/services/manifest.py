"""
Manifest synthesizer — builds the AndroidManifest for a package.

Each configurable field is resolved in three tiers:

    [package.metadata.apk]  >  [package.metadata.ori]  >  computed default

Platform versions and the activity attributes are fixed. The activity
is ``ori.oriactivity.OriActivity`` from the bundled classes.dex, a
NativeActivity that loads the package's cdylib; the attributes below
are what that runtime expects and are not user-configurable.
"""

from __future__ import annotations

import re

from oribuild.core.config.metadata import resolve_field
from oribuild.core.models.cargo import CargoPackage
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

# Platform baseline
MIN_SDK_VERSION = 21
TARGET_SDK_VERSION = 34
COMPILE_SDK_VERSION = 34
COMPILE_SDK_CODENAME = 14  # Android 14

DEFAULT_PACKAGE_PREFIX = "org.ori."
DEFAULT_VERSION_CODE = 1

APPLICATION_THEME = "@android:style/Theme.DeviceDefault.NoActionBar.TranslucentDecor"
ICON_REFERENCE = "@mipmap/ic_launcher"

ACTIVITY_NAME = "ori.oriactivity.OriActivity"
LIB_NAME_META = "android.app.lib_name"
CONFIG_CHANGES = (
    "orientation",
    "keyboardHidden",
    "keyboard",
    "screenSize",
    "smallestScreenSize",
    "locale",
    "layoutDirection",
    "fontScale",
    "screenLayout",
    "density",
    "uiMode",
)

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")


def normalize_name(name: str) -> str:
    """Crate name as used for identifiers and library names (``my-app`` → ``my_app``)."""
    return _NON_IDENTIFIER.sub("_", name)


def default_package_id(name: str) -> str:
    return DEFAULT_PACKAGE_PREFIX + normalize_name(name)


def _activity(label: str, lib_name: str) -> Activity:
    return Activity(
        name=ACTIVITY_NAME,
        label=label,
        exported=True,
        hardware_accelerated=True,
        window_soft_input_mode="adjustResize",
        launch_mode="singleTop",
        config_changes="|".join(CONFIG_CHANGES),
        meta_data=[MetaData(name=LIB_NAME_META, value=lib_name)],
        intent_filters=[
            IntentFilter(
                actions=["android.intent.action.MAIN"],
                categories=["android.intent.category.LAUNCHER"],
            )
        ],
    )


def synthesize(
    package: CargoPackage,
    ori: OriMetadata,
    apk: ApkMetadata,
    debuggable: bool = True,
) -> AndroidManifest:
    """Build the manifest for ``package``. Pure; touches nothing on disk."""
    label = resolve_field(ori.name, default=package.name)

    return AndroidManifest(
        package=resolve_field(apk.package, default=default_package_id(package.name)),
        version_code=resolve_field(apk.version_code, default=DEFAULT_VERSION_CODE),
        version_name=resolve_field(apk.version_name, default=package.version),
        compile_sdk_version=COMPILE_SDK_VERSION,
        compile_sdk_version_codename=COMPILE_SDK_CODENAME,
        platform_build_version_code=COMPILE_SDK_VERSION,
        platform_build_version_name=COMPILE_SDK_CODENAME,
        sdk=UsesSdk(
            min_sdk_version=MIN_SDK_VERSION,
            target_sdk_version=TARGET_SDK_VERSION,
        ),
        uses_feature=[Feature(name=name) for name in apk.uses_feature],
        uses_permission=[Permission(name=name) for name in apk.uses_permission],
        application=Application(
            label=label,
            theme=APPLICATION_THEME,
            icon=ICON_REFERENCE if apk.icon else None,
            debuggable=debuggable,
            activities=[_activity(label, normalize_name(package.name))],
        ),
    )
