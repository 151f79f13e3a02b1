"""CLI utilities for runbox.

Error presentation and interrupt handling shared by commands.
"""

from __future__ import annotations

import contextlib
import signal
import sys
import threading
from collections.abc import Iterator
from typing import NoReturn

from rich.console import Console
from rich.markup import escape

from ..constants import EXIT_CANCELLED, EXIT_ERROR
from ..errors import CancellationError, RunboxError
from ..logging import get_logger

err_console = Console(stderr=True)
logger = get_logger(__name__)


def fail(error: RunboxError) -> NoReturn:
    """Print an error the way every command does and exit non-zero."""
    if isinstance(error, CancellationError):
        err_console.print(f"[yellow]Cancelled: {escape(str(error))}[/yellow]")
        sys.exit(EXIT_CANCELLED)
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(EXIT_ERROR)


@contextlib.contextmanager
def cancel_on_interrupt(cancel: threading.Event) -> Iterator[threading.Event]:
    """Turn SIGINT/SIGTERM into a cancellation signal for the duration.

    Only installs handlers on the main thread; elsewhere the event must be
    set by the caller.
    """
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    def _handle(signum: int, _frame: object) -> None:
        logger.debug("Signal %d received, cancelling", signum)
        cancel.set()

    previous = {
        sig: signal.signal(sig, _handle) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        yield cancel
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
