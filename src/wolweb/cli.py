"""Command-line interface for wolweb."""

import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from wolweb import __version__
from wolweb.core.wake import Settings, WakeStatus

DEFAULT_CONFIG = Path.home() / ".config" / "wolweb" / "config.yaml"

EXIT_CONFIG = 1
EXIT_INVALID_ADDRESS = 2
EXIT_UNKNOWN_DEVICE = 3
EXIT_NETWORK = 4

_WAKE_EXIT_CODES = {
    WakeStatus.SUCCESS: 0,
    WakeStatus.INVALID_ADDRESS: EXIT_INVALID_ADDRESS,
    WakeStatus.UNKNOWN_DEVICE: EXIT_UNKNOWN_DEVICE,
    WakeStatus.NETWORK_ERROR: EXIT_NETWORK,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_app_config(ctx: click.Context):
    from wolweb.config.loader import ConfigError, load_app_config

    try:
        settings, web = load_app_config(Path(ctx.obj["config"]))
    except ConfigError as exc:
        click.echo(f"Config error: {exc}", err=True)
        sys.exit(EXIT_CONFIG)
    if ctx.obj.get("devices"):
        settings = dataclasses.replace(settings, devices_file=Path(ctx.obj["devices"]))
    return settings, web


def _load_settings(ctx: click.Context) -> Settings:
    settings, _ = _load_app_config(ctx)
    return settings


def _load_registry(settings: Settings):
    from wolweb.core.registry import ConfigLoadError, load_registry

    try:
        return load_registry(settings.devices_file)
    except ConfigLoadError as exc:
        click.echo(f"Device list error: {exc}", err=True)
        sys.exit(EXIT_CONFIG)


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="wolweb")
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG),
    envvar="WOLWEB_CONFIG",
    show_default=True,
    help="Path to wolweb config.yaml",
)
@click.option(
    "--devices",
    "-d",
    default=None,
    envvar="WOLWEB_DEVICES",
    help="Path to the device list (overrides devices_file in config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, devices: Optional[str], verbose: bool) -> None:
    """wolweb: send Wake-on-LAN packets to machines by name."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["devices"] = devices


# ── devices group ─────────────────────────────────────────────────────────────


@main.group()
def devices() -> None:
    """Inspect the device list."""


@devices.command("list")
@click.pass_context
def devices_list(ctx: click.Context) -> None:
    """List all configured devices."""
    settings = _load_settings(ctx)
    registry = _load_registry(settings)
    if not len(registry):
        click.echo("No devices configured.")
        return
    click.echo(f"{'KEY':<20} {'NAME':<24} {'MAC':<19} {'BROADCAST'}")
    click.echo("─" * 80)
    for d in registry:
        click.echo(
            f"{d.key:<20} {d.display_name:<24} {d.hardware_address:<19} "
            f"{d.broadcast_address or settings.broadcast + ' (default)'}"
        )


@devices.command("check")
@click.pass_context
def devices_check(ctx: click.Context) -> None:
    """Load the device list and validate every hardware address."""
    from wolweb.core.mac import InvalidAddressError, normalize_mac

    settings = _load_settings(ctx)
    registry = _load_registry(settings)
    bad = 0
    for d in registry:
        try:
            mac = normalize_mac(d.hardware_address, reject_suspicious=settings.reject_suspicious)
        except InvalidAddressError as exc:
            bad += 1
            click.echo(f"✗  {d.key}: {exc}", err=True)
            continue
        click.echo(f"✓  {d.key}: {mac}")
    if bad:
        click.echo(f"{bad} of {len(registry)} device(s) have invalid addresses.", err=True)
        sys.exit(EXIT_INVALID_ADDRESS)
    click.echo(f"{len(registry)} device(s) OK in {registry.source}")


# ── wake command ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("device_key")
@click.pass_context
def wake(ctx: click.Context, device_key: str) -> None:
    """Send a Wake-on-LAN packet to the device named DEVICE_KEY."""
    from wolweb.core.wake import wake_device

    settings = _load_settings(ctx)
    registry = _load_registry(settings)
    result = wake_device(registry, device_key, settings)
    if result.ok:
        click.echo(f"✓  {result.message}")
        return
    click.echo(f"✗  {result.message}", err=True)
    sys.exit(_WAKE_EXIT_CODES[result.status])


# ── init command ──────────────────────────────────────────────────────────────


@main.command()
@click.option("--force", is_flag=True, help="Overwrite an existing device list")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Write a sample device list to edit."""
    from wolweb.config.writer import SAMPLE_DEVICES, write_devices

    settings = _load_settings(ctx)
    path = settings.devices_file
    if path.exists() and not force:
        click.echo(f"Device list exists at {path} (leaving as-is; use --force to overwrite)")
        return
    try:
        write_devices(path, SAMPLE_DEVICES)
    except OSError as exc:
        click.echo(f"Cannot write {path}: {exc}", err=True)
        sys.exit(EXIT_CONFIG)
    click.echo(f"Wrote sample device list to {path}. Edit it to set your MACs and broadcast.")


# ── serve command ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind host")
@click.option("--port", default=8000, show_default=True, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Start the wolweb web UI and API server."""
    import uvicorn

    from wolweb.api.routes import create_app
    from wolweb.core.registry import ConfigLoadError

    settings, web = _load_app_config(ctx)
    try:
        app = create_app(settings=settings, web=web)
    except ConfigLoadError as exc:
        click.echo(f"Device list error: {exc}", err=True)
        sys.exit(EXIT_CONFIG)
    click.echo(f"Starting wolweb at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
