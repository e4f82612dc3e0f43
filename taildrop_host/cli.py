"""Thin CLI wrapper for taildrop_host.

This module provides the operator command-line interface using Typer.
The browser itself launches ``taildrop_host.host:main``; these commands
exercise the same services by hand and help with installation.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from taildrop_host import __version__
from taildrop_host.config import get_settings, print_settings_json

app = typer.Typer(
    name="taildrop-host",
    help="Taildrop Native Host - send files from the browser with Tailscale",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"taildrop-host version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Taildrop Native Host - send files from the browser with Tailscale."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
        return

    temp_dir_display = (
        str(settings.temp_dir) if settings.temp_dir else "(system default)"
    )
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Logging:[/bold]")
    console.print(f"  Log file:            {settings.log_file}")
    console.print(f"  Log level:           {settings.log_level}")
    console.print()
    console.print("[bold]Tailscale:[/bold]")
    console.print(f"  CLI binary:          {settings.tailscale_bin}")
    console.print()
    console.print("[bold]Staging:[/bold]")
    console.print(f"  Temp directory:      {temp_dir_display}")
    console.print(f"  Temp prefix:         {settings.temp_prefix}")
    console.print(f"  Default extension:   {settings.default_extension}")
    console.print()
    console.print("[bold]Native messaging:[/bold]")
    console.print(f"  Host name:           {settings.host_name}")


@app.command()
def serve() -> None:
    """Answer one native-messaging request on stdin/stdout.

    This is what the browser runs; use it to test the host with a framed
    request piped in.
    """
    from taildrop_host.host import run_host

    raise typer.Exit(code=run_host())


@app.command()
def devices(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List devices that can receive files right now."""
    from taildrop_host.devices.service import DeviceService
    from taildrop_host.errors import HostError
    from taildrop_host.tailscale.runner import TailscaleClient, ToolRunner

    settings = get_settings()
    client = TailscaleClient(ToolRunner(logger), binary=settings.tailscale_bin)
    try:
        found = DeviceService(client, logger).list_devices()
    except HostError as e:
        console.print(f"[red]Failed to list devices: {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        typer.echo(json.dumps([d.model_dump(mode="json") for d in found], indent=2))
        return

    if not found:
        console.print("[yellow]No Taildrop-capable devices online[/yellow]")
        return

    console.print(f"[bold]Found {len(found)} device(s):[/bold]")
    console.print()
    for d in found:
        console.print(f"  [green]{d.name}[/green]")
        console.print(f"    ID: {d.id}")
        console.print(f"    OS: {d.os.value}")
        console.print()


@app.command()
def send(
    device_name: Annotated[str, typer.Argument(help="Target device name")],
    path: Annotated[Path, typer.Argument(help="File to send")],
) -> None:
    """Send a local file to a device."""
    from taildrop_host.errors import HostError
    from taildrop_host.tailscale.runner import TailscaleClient, ToolRunner
    from taildrop_host.transfer.service import FileTransferService, resolve_extension

    if not path.is_file():
        console.print(f"[red]File not found: {escape(str(path))}[/red]")
        raise typer.Exit(code=1)

    settings = get_settings()
    client = TailscaleClient(ToolRunner(logger), binary=settings.tailscale_bin)
    service = FileTransferService(
        client,
        logger,
        temp_prefix=settings.temp_prefix,
        temp_dir=settings.temp_dir,
        default_extension=settings.default_extension,
    )
    try:
        service.send_bytes(
            device_name,
            path.read_bytes(),
            resolve_extension(path.name, "", settings.default_extension),
        )
    except HostError as e:
        console.print(f"[red]Failed to send {path.name}: {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from None

    console.print(f"[green]Sent {path.name} to {device_name}[/green]")


@app.command()
def manifest(
    host_path: Annotated[
        Path,
        typer.Option("--path", help="Path to the native host executable"),
    ],
    extension_ids: Annotated[
        list[str] | None,
        typer.Option(
            "--extension-id", help="Chrome extension ID (can be repeated)"
        ),
    ] = None,
    firefox_ids: Annotated[
        list[str] | None,
        typer.Option("--firefox-id", help="Firefox add-on ID (can be repeated)"),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", help="Host name (defaults to configured host name)"),
    ] = None,
) -> None:
    """Print the native messaging host manifest JSON."""
    from taildrop_host.manifest import build_manifest, render_manifest

    settings = get_settings()
    try:
        doc = build_manifest(
            name=name or settings.host_name,
            description=settings.host_description,
            host_path=host_path,
            chrome_ids=extension_ids,
            firefox_ids=firefox_ids,
        )
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    # Rich would re-wrap long paths.
    typer.echo(render_manifest(doc))


if __name__ == "__main__":
    app()
