"""Terminal geometry discovery for attached runs."""

from __future__ import annotations

import os
from typing import IO, Any

from .errors import StreamError
from .logging import get_logger

logger = get_logger(__name__)


def is_terminal(stream: IO[Any]) -> bool:
    """Check if stream is attached to a terminal."""
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # Closed stream
        return False


def get_terminal_width(stream: IO[Any]) -> int | None:
    """Return the column count of `stream`, or None if it is not a terminal.

    A redirected sink (file, pipe) only degrades formatting, so it is not
    treated as an error.

    Raises:
        StreamError: If the stream is a terminal but its size cannot be read.
    """
    if not is_terminal(stream):
        logger.debug("Output is not a terminal, streaming without width")
        return None
    try:
        size = os.get_terminal_size(stream.fileno())
    except (OSError, ValueError) as e:
        raise StreamError(f"cannot determine terminal size: {e}") from e
    logger.debug("Terminal size: %dx%d", size.columns, size.lines)
    return size.columns
