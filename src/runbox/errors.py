"""Unified exception hierarchy for runbox.

All custom exceptions inherit from RunboxError for consistent error handling.
CLI catches these and converts them to user-friendly messages and exit codes.

Dependency direction:
    This module has NO internal dependencies (leaf module).
    It may be imported by: all other runbox modules.
    It should NOT import from any other runbox modules.
"""

from __future__ import annotations


class RunboxError(Exception):
    """Base exception for all runbox errors.

    All runbox-specific exceptions should inherit from this class.
    This enables consistent error handling at the CLI layer.
    """


class ConfigError(RunboxError):
    """Configuration-related errors.

    Examples:
        - Invalid configuration values
        - Configuration file parse errors
    """


class BackendNotFoundError(ConfigError):
    """Raised when the requested container backend is not registered."""


class DockerError(RunboxError):
    """Docker operation errors.

    Base class for all Docker-related exceptions.
    """


class DockerNotFoundError(DockerError):
    """Raised when Docker is not installed or not in PATH."""


class DockerTimeoutError(DockerError):
    """Raised when a Docker operation times out."""


class ValidationError(RunboxError):
    """Input validation errors.

    Examples:
        - Malformed port, volume, label or env spec
        - Unreadable environment file
        - Invalid memory quantity or CPU count
        - Unknown restart policy
    """


class SubmissionError(RunboxError):
    """Raised when the backend rejects or fails to create the container."""


class StreamError(RunboxError):
    """Raised when log streaming fails after the container was created.

    The container itself keeps running; only the attachment is lost.
    """


class CancellationError(RunboxError):
    """Raised when the caller interrupts an in-progress operation."""
