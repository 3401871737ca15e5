"""Command-line interface for horizon-docs.

This module defines the CLI commands using Click framework.

Commands:
- serve: Serve the build directory over HTTP.
- resolve: Show how a request path would be answered, without a socket.
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __version__
from .config import ConfigError, ServerConfig, build_server_config


@click.group()
@click.version_option(version=__version__, prog_name="horizon-docs")
def cli():
    """Static server for the Horizon documentation site."""


@cli.command()
@click.option(
    "--port",
    type=click.IntRange(0, 65535),
    required=False,
    help="Port to listen on (overrides PORT and horizon.yaml)",
)
@click.option(
    "--host", required=False, help="Interface to bind (default: all interfaces)"
)
@click.option(
    "--build-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help=(
        "Directory containing the built site "
        "(default: ./build in the current directory)"
    ),
)
@click.option("--access-log", is_flag=True, help="Log one line per request to stderr")
def serve(
    port: int | None, host: str | None, build_dir: Path | None, access_log: bool
):
    """Serve the built site.

    Without --build-dir or a build_dir in horizon.yaml, the site is served from
    ./build relative to the current working directory.
    """
    config = _load(
        {
            "port": port,
            "host": host,
            "build_dir": build_dir,
            "access_log": access_log or None,
        }
    )
    if not config.build_dir.is_dir():
        warning = f"Warning: build directory not found: {config.build_dir}"
        click.echo(click.style(warning, fg="yellow"), err=True)
    from .server import DocsServer

    server = DocsServer(config)
    try:
        server.bind()
    except OSError as exc:
        raise click.ClickException(
            f"Could not listen on port {config.port}: {exc.strerror or exc}"
        ) from exc
    server.start()


@cli.command()
@click.argument("target")
@click.option(
    "--build-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Directory containing the built site (default: ./build)",
)
def resolve(target: str, build_dir: Path | None):
    """Show how TARGET would be answered."""
    config = _load({"build_dir": build_dir})
    from .responder import resolve_request

    response = resolve_request(config, target)
    click.echo(f"Status: {response.status}")
    click.echo(f"Content-Type: {response.content_type}")
    if response.source is not None:
        click.echo(f"File: {response.source}")
    else:
        click.echo(f"Body: {response.body.decode('utf-8', errors='replace')}")


def _load(overrides: dict) -> ServerConfig:
    try:
        return build_server_config(Path.cwd(), overrides)
    except ConfigError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from None


def main():
    """Entry point for the CLI application."""
    cli()
