"""CLI package for runbox.

This package contains the CLI commands and supporting modules:
- run: the `run` command, built per backend
- utils: error presentation and interrupt handling

The `run` command is resolved lazily from the active backend so that
backend-specific options are registered from its declared capabilities.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..backends import Backend, get_backend, list_backends
from ..config import load_config, resolve_backend_name, save_config
from ..errors import RunboxError
from ..logging import configure_logging
from .run import make_run_command
from .utils import fail

console = Console()

__all__ = ["cli", "make_run_command"]


def _active_backend(ctx: click.Context) -> Backend:
    """Backend selected by --backend, RUNBOX_BACKEND or the config file."""
    try:
        return get_backend(resolve_backend_name(ctx.params.get("backend")))
    except RunboxError as e:
        fail(e)


class RunboxGroup(click.Group):
    """Group that builds `run` for the active backend on demand."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), "run"})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name == "run":
            return make_run_command(_active_backend(ctx))
        return super().get_command(ctx, cmd_name)


@click.group(cls=RunboxGroup)
@click.option(
    "--backend",
    "-b",
    help="Container backend to use (default: RUNBOX_BACKEND or config file)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__, prog_name="runbox")
def cli(backend: str | None, debug: bool) -> None:
    """runbox - Run a container and attach to its output."""
    configure_logging(debug)


@cli.command()
@click.pass_context
def backends(ctx: click.Context) -> None:
    """List available container backends."""
    active = resolve_backend_name(ctx.parent.params.get("backend") if ctx.parent else None)

    table = Table(title="Available Backends")
    table.add_column("Backend", style="cyan")
    table.add_column("Description")
    table.add_column("Extra options")

    for backend in list_backends():
        extras = ["--domainname"] if backend.capabilities.domain_name else []
        marker = " *" if backend.name == active else ""
        table.add_row(f"{backend.name}{marker}", backend.description, ", ".join(extras) or "-")

    console.print(table)
    console.print("\n[dim]* active backend. Change with: runbox use <backend>[/dim]")


@cli.command()
@click.argument("name")
def use(name: str) -> None:
    """Set the default container backend."""
    try:
        get_backend(name)
    except RunboxError as e:
        fail(e)

    config = load_config()
    config.backend = name
    save_config(config)
    console.print(f"[green]✓ Default backend set to {name}[/green]")


if __name__ == "__main__":  # pragma: no cover
    cli()
