"""Container service protocol.

The attach flow depends only on these two operations, so any backend that
provides them can be injected.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from .request import ContainerLaunchRequest, LogsRequest


@runtime_checkable
class ContainerService(Protocol):
    """Protocol for container backends.

    Backends are responsible for:
    - Creating and starting a container from a launch request
    - Relaying a container's output to a writable sink
    """

    def submit(
        self,
        request: ContainerLaunchRequest,
        cancel: threading.Event | None = None,
    ) -> str:
        """Create and start a container.

        Called at most once per invocation; callers never retry.

        Returns:
            Identifier of the started container.

        Raises:
            SubmissionError: If the backend rejects or fails to create it.
        """
        ...

    def stream_logs(
        self,
        request: LogsRequest,
        cancel: threading.Event | None = None,
    ) -> None:
        """Write the container's output to request.writer.

        Blocks until the stream ends. Must return promptly once `cancel` is
        set or the user interrupts.

        Raises:
            StreamError: If reading or writing the stream fails.
            CancellationError: If the stream was cancelled.
        """
        ...
