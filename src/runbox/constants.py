"""Constants module for runbox.

All timeout values and shared defaults are defined here (SSOT).
"""

from __future__ import annotations

# === Docker Timeouts (seconds) ===
DOCKER_COMMAND_TIMEOUT = 30  # Quick docker commands (info, inspect, ps)
DOCKER_RUN_TIMEOUT = 600  # docker run --detach may pull the image first

# === Log Streaming ===
STREAM_POLL_INTERVAL = 0.5  # select() slice between cancellation checks
STREAM_READ_SIZE = 4096
PROCESS_TERM_TIMEOUT = 3.0  # Log process termination timeout before SIGKILL

# === Run Defaults ===
DEFAULT_CPUS = 1.0
DEFAULT_RESTART_POLICY = "none"
DEFAULT_BACKEND = "docker"
CONTAINER_NAME_PREFIX = "runbox"

# === Exit Codes ===
EXIT_ERROR = 1
EXIT_CANCELLED = 130  # Standard Ctrl+C code
