"""Run-and-attach orchestration.

Submits a launch request to a ContainerService, then either reports the
container identifier (detached) or relays the container's output to the
invoking terminal until the stream ends.

    SUBMITTING -> DETACHED
    SUBMITTING -> ATTACHING -> STREAMING -> CLOSED
    any state  -> FAILED
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable
from enum import Enum
from typing import IO, Any

from .logging import get_logger
from .options import RunOptions
from .progress import run_with_progress
from .request import ContainerLaunchRequest, LogsRequest
from .service import ContainerService
from .terminal import get_terminal_width

logger = get_logger(__name__)

ProgressRunner = Callable[[str, Callable[[], str]], str]


class AttachState(str, Enum):
    """Lifecycle of a single run invocation."""

    PENDING = "pending"
    SUBMITTING = "submitting"
    DETACHED = "detached"
    ATTACHING = "attaching"
    STREAMING = "streaming"
    CLOSED = "closed"
    FAILED = "failed"


class AttachController:
    """Drives one container run from submission to end of output.

    Errors are never retried or wrapped; they propagate to the caller
    unchanged and leave the controller in the FAILED state. A streaming
    failure does not stop the container.
    """

    def __init__(
        self,
        service: ContainerService,
        *,
        stdout: IO[Any] | None = None,
        cancel: threading.Event | None = None,
        progress: ProgressRunner = run_with_progress,
    ) -> None:
        self.service = service
        self._stdout = stdout
        self.cancel = cancel if cancel is not None else threading.Event()
        self._progress = progress
        self.state = AttachState.PENDING
        self.container_id: str | None = None

    @property
    def stdout(self) -> IO[Any]:
        # Resolved late so redirected sys.stdout is honored
        return self._stdout if self._stdout is not None else sys.stdout

    def _transition(self, state: AttachState) -> None:
        logger.debug("Attach state: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self, options: RunOptions) -> str:
        """Launch the container described by `options`.

        Returns:
            Identifier of the started container.

        Raises:
            ValidationError: If the options cannot be turned into a request.
            SubmissionError: If the backend fails to start the container.
            StreamError: If the output stream fails after a successful start.
            CancellationError: If the run was cancelled.
        """
        try:
            self._transition(AttachState.SUBMITTING)
            request = options.to_launch_request()
            self.container_id = self._submit(request)

            if options.detach:
                self._transition(AttachState.DETACHED)
                print(self.container_id, file=self.stdout, flush=True)
                return self.container_id

            self._attach(self.container_id)
            self._transition(AttachState.CLOSED)
            return self.container_id
        except Exception:
            self._transition(AttachState.FAILED)
            raise

    def _submit(self, request: ContainerLaunchRequest) -> str:
        logger.info("Submitting container %s (image=%s)", request.id, request.image)
        return self._progress(
            f"Starting {request.id}...",
            lambda: self.service.submit(request, self.cancel),
        )

    def _attach(self, container_id: str) -> None:
        self._transition(AttachState.ATTACHING)
        sink = self.stdout
        logs_request = LogsRequest(
            container=container_id,
            writer=sink,
            follow=True,
            width=get_terminal_width(sink),
        )

        self._transition(AttachState.STREAMING)
        self.service.stream_logs(logs_request, self.cancel)
        logger.info("Log stream for %s closed", container_id)
