"""
Render an AndroidManifest model as AndroidManifest.xml text for aapt2.
"""

from __future__ import annotations

from xml.etree import ElementTree

from oribuild.core.models.manifest import Activity, AndroidManifest

ANDROID_NS = "http://schemas.android.com/apk/res/android"

ElementTree.register_namespace("android", ANDROID_NS)


def _a(name: str) -> str:
    return f"{{{ANDROID_NS}}}{name}"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _activity(parent: ElementTree.Element, activity: Activity) -> None:
    el = ElementTree.SubElement(parent, "activity", {
        _a("name"): activity.name,
        _a("label"): activity.label,
        _a("exported"): _bool(activity.exported),
        _a("hardwareAccelerated"): _bool(activity.hardware_accelerated),
        _a("windowSoftInputMode"): activity.window_soft_input_mode,
        _a("launchMode"): activity.launch_mode,
        _a("configChanges"): activity.config_changes,
    })
    for meta in activity.meta_data:
        ElementTree.SubElement(el, "meta-data", {_a("name"): meta.name, _a("value"): meta.value})
    for intent_filter in activity.intent_filters:
        f = ElementTree.SubElement(el, "intent-filter")
        for action in intent_filter.actions:
            ElementTree.SubElement(f, "action", {_a("name"): action})
        for category in intent_filter.categories:
            ElementTree.SubElement(f, "category", {_a("name"): category})


def render_manifest(manifest: AndroidManifest) -> str:
    root = ElementTree.Element("manifest", {
        "package": manifest.package,
        _a("versionCode"): str(manifest.version_code),
        _a("versionName"): manifest.version_name,
        _a("compileSdkVersion"): str(manifest.compile_sdk_version),
        _a("compileSdkVersionCodename"): str(manifest.compile_sdk_version_codename),
        "platformBuildVersionCode": str(manifest.platform_build_version_code),
        "platformBuildVersionName": str(manifest.platform_build_version_name),
    })

    ElementTree.SubElement(root, "uses-sdk", {
        _a("minSdkVersion"): str(manifest.sdk.min_sdk_version),
        _a("targetSdkVersion"): str(manifest.sdk.target_sdk_version),
    })

    for feature in manifest.uses_feature:
        attrs = {_a("name"): feature.name}
        if feature.required is not None:
            attrs[_a("required")] = _bool(feature.required)
        ElementTree.SubElement(root, "uses-feature", attrs)

    for permission in manifest.uses_permission:
        attrs = {_a("name"): permission.name}
        if permission.max_sdk_version is not None:
            attrs[_a("maxSdkVersion")] = str(permission.max_sdk_version)
        ElementTree.SubElement(root, "uses-permission", attrs)

    app = manifest.application
    app_attrs = {
        _a("label"): app.label,
        _a("theme"): app.theme,
        _a("hasCode"): _bool(app.has_code),
        _a("debuggable"): _bool(app.debuggable),
    }
    if app.icon:
        app_attrs[_a("icon")] = app.icon
    application = ElementTree.SubElement(root, "application", app_attrs)
    for activity in app.activities:
        _activity(application, activity)

    ElementTree.indent(root)
    return '<?xml version="1.0" encoding="utf-8"?>\n' + ElementTree.tostring(root, encoding="unicode") + "\n"
