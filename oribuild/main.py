"""
ori — CLI entrypoint.

Usage:
    ori --help
    ori apk build --target aarch64-linux-android
    ori apk install
    ori tools
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import click

from oribuild import __version__
from oribuild.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="ori")
@click.option("--verbose", "-v", is_flag=True, help="Show build steps and the tool commands being run.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ori.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """ori — build and install Android packages from Cargo projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("ORI_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("ORI_LOG_FILE"),
        log_file_level=os.environ.get("ORI_LOG_FILE_LEVEL"),
        show_commands=verbose or debug,
    )


@cli.command()
@click.option("--sdk", type=click.Path(path_type=Path), default=None, help="Path to the Android SDK root.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def tools(sdk: Path | None, as_json: bool) -> None:
    """Show which external tools are installed."""
    from oribuild.adapters.registry import default_registry

    status = default_registry(sdk).adapter_status()

    if as_json:
        click.echo(json.dumps(status, indent=2))
        return

    click.secho("🔧 Tools:", fg="cyan", bold=True)
    for name, info in status.items():
        if info["available"]:
            click.secho(f"   ✓ {name}", fg="green")
        else:
            click.secho(f"   ✗ {name}", fg="red", nl=False)
            click.echo(f"  → {info['install_hint']}")


# ── Register sub-command groups from oribuild/ui/cli/ ───────────

from oribuild.ui.cli.apk import apk

cli.add_command(apk)


if __name__ == "__main__":
    cli()
