"""Diagnostic logging for runbox.

User-facing output goes through rich consoles. This module only carries the
debug trail (launch request building, docker commands, attach state changes)
that `runbox --debug` or RUNBOX_DEBUG=1 turns on. Everything logs under the
`runbox` namespace to a single stderr handler.
"""

from __future__ import annotations

import logging
import os
import sys

ROOT_LOGGER = "runbox"
DEBUG_ENV_VAR = "RUNBOX_DEBUG"

_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DEBUG_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d: %(message)s"

_handler = logging.StreamHandler(sys.stderr)
logging.getLogger(ROOT_LOGGER).addHandler(_handler)


def debug_requested() -> bool:
    """True when RUNBOX_DEBUG asks for debug output."""
    return os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes")


def configure_logging(debug: bool = False) -> None:
    """Set the runbox log level for the current invocation.

    Debug output is enabled by the `--debug` flag or by RUNBOX_DEBUG;
    otherwise only warnings and errors are shown.
    """
    enabled = debug or debug_requested()
    logging.getLogger(ROOT_LOGGER).setLevel(logging.DEBUG if enabled else logging.WARNING)
    _handler.setFormatter(logging.Formatter(_DEBUG_FORMAT if enabled else _FORMAT))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for `name`, placed under the runbox namespace."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


configure_logging()
