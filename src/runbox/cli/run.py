"""The `run` command.

The command is built per backend: options a backend cannot honor are
never registered, so `runbox run --help` only shows what will work.
"""

from __future__ import annotations

import threading
from typing import Any

import click

from ..attach import AttachController
from ..backends import Backend, BackendCapabilities
from ..constants import DEFAULT_CPUS, DEFAULT_RESTART_POLICY
from ..errors import RunboxError
from ..logging import get_logger
from ..options import RunOptions
from .utils import cancel_on_interrupt, fail

logger = get_logger(__name__)


def run_options(capabilities: BackendCapabilities) -> list[click.Parameter]:
    """Return the run command's parameters for a backend."""
    params: list[click.Parameter] = [
        click.Argument(["args"], nargs=-1, required=True, metavar="IMAGE [COMMAND]..."),
        click.Option(
            ["--publish", "-p"],
            multiple=True,
            help="Publish a container's port(s). [HOST_PORT:]CONTAINER_PORT",
        ),
        click.Option(["--name"], help="Assign a name to the container"),
        click.Option(["--label", "-l", "labels"], multiple=True, help="Set meta data on a container"),
        click.Option(
            ["--volume", "-v", "volumes"],
            multiple=True,
            help="Bind mount a volume. SOURCE[:TARGET][:ro]",
        ),
        click.Option(
            ["--detach", "-d"],
            is_flag=True,
            help="Run container in background and print container ID",
        ),
        click.Option(
            ["--cpus"],
            type=float,
            default=DEFAULT_CPUS,
            show_default=True,
            help="Number of CPUs",
        ),
        click.Option(["--memory", "-m"], help="Memory limit (e.g. 512m, 2g)"),
        click.Option(["--env", "-e"], multiple=True, help="Set environment variables"),
        click.Option(
            ["--envFile", "--env-file", "env_files"],
            multiple=True,
            help="Path to environment files to be translated as environment variables",
        ),
        click.Option(
            ["--restart"],
            default=DEFAULT_RESTART_POLICY,
            show_default=True,
            help="Restart policy to apply when a container exits",
        ),
    ]
    if capabilities.domain_name:
        params.append(click.Option(["--domainname", "domain_name"], help="Container NIS domain name"))
    return params


def execute_run(backend: Backend, args: tuple[str, ...], **flags: Any) -> None:
    """Build options from CLI input and run the attach flow."""
    logger.info("Starting run: backend=%s image=%s", backend.name, args[0] if args else None)
    try:
        options = RunOptions.from_cli(args, **flags)
        controller = AttachController(backend.factory(), cancel=threading.Event())
        with cancel_on_interrupt(controller.cancel):
            controller.run(options)
    except RunboxError as e:
        logger.debug("Run failed: %s", e)
        fail(e)


def make_run_command(backend: Backend) -> click.Command:
    """Create the `run` command for a backend."""

    def callback(**kwargs: Any) -> None:
        args = kwargs.pop("args")
        execute_run(backend, args, **kwargs)

    return click.Command(
        "run",
        callback=callback,
        params=run_options(backend.capabilities),
        help="Run a container.",
        short_help="Run a container",
        context_settings={"allow_interspersed_args": False},
    )
