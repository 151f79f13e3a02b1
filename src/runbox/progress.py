"""Progress feedback around long-running backend calls."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from rich.console import Console

T = TypeVar("T")

console = Console(stderr=True)


def run_with_progress(message: str, fn: Callable[[], T]) -> T:
    """Run `fn` under a status spinner and return its result unchanged.

    Exceptions from `fn` propagate as-is. The spinner is only drawn when
    stderr is a terminal.
    """
    if not console.is_terminal:
        return fn()
    with console.status(f"[dim]{message}[/dim]"):
        return fn()
