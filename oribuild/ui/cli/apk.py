"""
CLI commands for Android packages.

Thin wrappers over ``oribuild.core.use_cases.apk``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, NoReturn

import click

from oribuild.core.errors import OriError, ToolNotInstalledError


def _fail(error: OriError, as_json: bool) -> NoReturn:
    """Report ``error`` and exit 1."""
    if as_json:
        click.echo(json.dumps({"error": str(error), "kind": type(error).__name__}, indent=2))
        sys.exit(1)

    click.secho(f"❌ {error}", fg="red")
    if isinstance(error, ToolNotInstalledError) and error.hint:
        click.echo(f"   💡 {error.hint}")
    sys.exit(1)


def _split_features(values: tuple[str, ...]) -> tuple[str, ...]:
    """Accept both ``-F a -F b`` and ``-F a,b``."""
    features: list[str] = []
    for value in values:
        features.extend(f.strip() for f in value.split(",") if f.strip())
    return tuple(features)


def _make_options(ctx: click.Context, **flags: Any):
    from oribuild.core.config.loader import load_config, merge_options

    config = load_config(ctx.obj.get("config_path"))
    flags["features"] = _split_features(flags.get("features", ()))
    flags["verbose"] = bool(ctx.obj.get("verbose"))
    return merge_options(config, **flags)


def _offer_cross_install(registry) -> None:
    """Ask to install cross when it is missing and a user is at the terminal."""
    from oribuild.adapters.cargo import CrossAdapter

    cross = registry.require("cross", CrossAdapter)
    if cross.is_available() or not sys.stdin.isatty():
        return
    if not click.confirm("`cross` is not installed, do you want to install it?", default=True):
        raise ToolNotInstalledError("cross", cross.install_hint)
    click.secho("📦 Installing cross…", fg="cyan")
    cross.install()


_BUILD_OPTIONS = (
    click.option("--sdk", type=click.Path(path_type=Path), default=None, help="Path to the Android SDK root."),
    click.option("--release", "-r", is_flag=True, help="Build the artifact in release mode, with optimizations."),
    click.option("--pem", type=click.Path(path_type=Path), default=None,
                 help="PEM file with the signing key and certificate."),
    click.option("--target", default=None, help="Target triple, e.g. aarch64-linux-android."),
    click.option("--package", "-p", default=None, help="Cargo package to build."),
    click.option("--offline", is_flag=True, help="Run without accessing the network."),
    click.option("--features", "-F", multiple=True, help="Features to enable (repeatable or comma-separated)."),
    click.option("--manifest-path", type=click.Path(path_type=Path), default=None, help="Path to Cargo.toml."),
    click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."),
)


def build_options(func: Callable) -> Callable:
    """Options shared by ``build`` and ``install``."""
    for option in reversed(_BUILD_OPTIONS):
        func = option(func)
    return func


def _echo_diagnostics(as_json: bool) -> Callable[[str], None]:
    # Keep stdout clean for the JSON document.
    if as_json:
        return lambda line: click.echo(line, err=True)
    return click.echo


@click.group()
def apk() -> None:
    """APK — build and install Android packages."""


# ── Build ───────────────────────────────────────────────────────


@apk.command()
@build_options
@click.pass_context
def build(ctx: click.Context, as_json: bool, **flags: Any) -> None:
    """Build an APK from a Cargo project."""
    from oribuild.adapters.registry import default_registry
    from oribuild.core.use_cases.apk import build_apk

    try:
        options = _make_options(ctx, **flags)
        registry = default_registry(options.sdk)
        _offer_cross_install(registry)
        result = build_apk(options, registry=registry, echo=_echo_diagnostics(as_json))
    except OriError as e:
        _fail(e, as_json)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.secho(f"✅ Built {result.package} ({result.target.abi})", fg="green", bold=True)
    click.echo(f"   📦 {result.apk_path}")


@apk.command()
@build_options
@click.option("--device", "-d", default=None, help="adb device id to install to.")
@click.pass_context
def install(ctx: click.Context, as_json: bool, **flags: Any) -> None:
    """Build an APK and install it with adb."""
    from oribuild.adapters.registry import default_registry
    from oribuild.core.use_cases.apk import install_apk

    try:
        options = _make_options(ctx, **flags)
        registry = default_registry(options.sdk)
        _offer_cross_install(registry)
        result = install_apk(options, registry=registry, echo=_echo_diagnostics(as_json))
    except OriError as e:
        _fail(e, as_json)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.secho(f"✅ Installed {result.package} on {result.device.id}", fg="green", bold=True)
    click.echo(f"   📦 {result.apk_path}")


# ── Observe ─────────────────────────────────────────────────────


@apk.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def devices(as_json: bool) -> None:
    """List attached devices and their architectures."""
    from oribuild.adapters.adb import AdbAdapter
    from oribuild.core.services.devices import list_devices

    try:
        found = list_devices(AdbAdapter())
    except OriError as e:
        _fail(e, as_json)

    if as_json:
        click.echo(json.dumps(
            [{"id": d.id, "abi": d.target.abi, "target": d.target.triple} for d in found],
            indent=2,
        ))
        return

    if not found:
        click.secho("⚠️  No devices attached", fg="yellow")
        return

    click.secho(f"📱 Devices ({len(found)}):", fg="cyan", bold=True)
    for device in found:
        click.echo(f"   {device.id:<24} {device.target.abi:<12} {device.target.triple}")


@apk.command()
@click.option("--package", "-p", default=None, help="Cargo package to describe.")
@click.option("--manifest-path", type=click.Path(path_type=Path), default=None, help="Path to Cargo.toml.")
@click.option("--release", "-r", is_flag=True, help="Synthesize the release (non-debuggable) manifest.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def manifest(ctx: click.Context, as_json: bool, **flags: Any) -> None:
    """Print the AndroidManifest.xml the build would use."""
    from oribuild.adapters.apk.manifest_xml import render_manifest
    from oribuild.adapters.registry import default_registry
    from oribuild.core.use_cases.apk import load_package

    try:
        options = _make_options(ctx, **flags)
        package_ctx = load_package(options, default_registry(options.sdk))
    except OriError as e:
        _fail(e, as_json)

    if as_json:
        click.echo(package_ctx.manifest.model_dump_json(indent=2))
        return

    click.echo(render_manifest(package_ctx.manifest), nl=False)
