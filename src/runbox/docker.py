"""Local Docker engine backend for runbox.

Translates launch requests into `docker run` invocations and relays
`docker logs` output, using the docker CLI found on PATH.
"""

from __future__ import annotations

import contextlib
import io
import os
import select
import subprocess
import threading
from typing import IO, TYPE_CHECKING, Any

from .constants import (
    DOCKER_COMMAND_TIMEOUT,
    DOCKER_RUN_TIMEOUT,
    PROCESS_TERM_TIMEOUT,
    STREAM_POLL_INTERVAL,
    STREAM_READ_SIZE,
)
from .errors import (
    CancellationError,
    DockerError,
    DockerNotFoundError,
    DockerTimeoutError,
    StreamError,
    SubmissionError,
)
from .logging import get_logger
from .request import ContainerLaunchRequest, LogsRequest, RestartPolicy

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "DockerService",
    "build_run_command",
    "safe_docker_run",
]

# docker run spells "none" as "no"
_RESTART_FLAG: dict[RestartPolicy, str] = {
    RestartPolicy.NONE: "no",
    RestartPolicy.ALWAYS: "always",
    RestartPolicy.ON_FAILURE: "on-failure",
    RestartPolicy.UNLESS_STOPPED: "unless-stopped",
}


def safe_docker_run(
    cmd: Sequence[str],
    *,
    timeout: int = DOCKER_COMMAND_TIMEOUT,
    capture_output: bool = True,
    check: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run a Docker command with consistent error handling.

    Args:
        cmd: Command to run (should start with 'docker').
        timeout: Command timeout in seconds.
        capture_output: Capture stdout/stderr if True.
        check: Raise CalledProcessError on non-zero exit.

    Returns:
        CompletedProcess with command result.

    Raises:
        DockerNotFoundError: If docker command is not found.
        DockerTimeoutError: If command times out.
        subprocess.CalledProcessError: If check=True and command fails.
    """
    cmd_str = " ".join(cmd[:4]) + ("..." if len(cmd) > 4 else "")
    logger.debug("Running Docker command: %s", cmd_str)
    try:
        result = subprocess.run(
            cmd,
            capture_output=capture_output,
            text=True,
            check=check,
            timeout=timeout,
        )
        logger.debug("Docker command completed: exit=%d", result.returncode)
        return result
    except FileNotFoundError as e:
        logger.error("Docker not found in PATH: %s", cmd_str)
        raise DockerNotFoundError(f"Docker not found in PATH. Command: {cmd_str}") from e
    except subprocess.TimeoutExpired as e:
        logger.error("Docker command timed out after %ds: %s", timeout, cmd_str)
        raise DockerTimeoutError(
            f"Docker command timed out after {timeout}s. Command: {cmd_str}"
        ) from e


def build_run_command(request: ContainerLaunchRequest) -> list[str]:
    """Translate a launch request into a detached `docker run` command."""
    cmd = ["docker", "run", "--detach", "--name", request.id]

    for port in request.ports:
        if ":" in port.host_ip:
            host = f"[{port.host_ip}]:"
        elif port.host_ip:
            host = f"{port.host_ip}:"
        else:
            host = ""
        cmd.extend(["--publish", f"{host}{port.host_port}:{port.container_port}/{port.protocol}"])

    for key, value in request.labels.items():
        cmd.extend(["--label", f"{key}={value}"])

    for volume in request.volumes:
        spec = f"{volume.source}:{volume.target}"
        if volume.read_only:
            spec += ":ro"
        cmd.extend(["--volume", spec])

    for key, value in request.environment.items():
        cmd.extend(["--env", f"{key}={value}"])

    cmd.append(f"--cpus={request.cpu_limit:g}")
    if request.memory_limit:
        cmd.append(f"--memory={request.memory_limit}b")
    cmd.append(f"--restart={_RESTART_FLAG[request.restart_policy]}")
    if request.domain_name:
        cmd.extend(["--domainname", request.domain_name])

    cmd.append(request.image)
    cmd.extend(request.command)
    return cmd


def _write_chunk(writer: IO[Any], data: bytes) -> None:
    """Write raw bytes to a text or binary sink."""
    buffer = getattr(writer, "buffer", None)
    if buffer is not None:
        writer.flush()
        buffer.write(data)
        buffer.flush()
    elif isinstance(writer, io.TextIOBase):
        writer.write(data.decode("utf-8", errors="replace"))
        writer.flush()
    else:
        writer.write(data)
        writer.flush()


def _terminate(proc: subprocess.Popen[bytes]) -> None:
    """Stop the log process if it is still running."""
    if proc.poll() is None:
        proc.terminate()
        try:
            proc.wait(timeout=PROCESS_TERM_TIMEOUT)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
    for pipe in (proc.stdout, proc.stderr):
        if pipe is not None:
            with contextlib.suppress(OSError):
                pipe.close()


class DockerService:
    """ContainerService backed by the local docker CLI."""

    name = "docker"

    def submit(
        self,
        request: ContainerLaunchRequest,
        cancel: threading.Event | None = None,
    ) -> str:
        if cancel is not None and cancel.is_set():
            raise CancellationError("submission cancelled")

        try:
            result = safe_docker_run(build_run_command(request), timeout=DOCKER_RUN_TIMEOUT)
        except DockerError as e:
            raise SubmissionError(str(e)) from e
        except KeyboardInterrupt as e:
            raise CancellationError("submission interrupted") from e

        if result.returncode != 0:
            # Ctrl+C reaches docker too; report the interrupt, not its exit code
            if cancel is not None and cancel.is_set():
                raise CancellationError("submission interrupted")
            detail = (result.stderr or "").strip() or f"docker exited with code {result.returncode}"
            raise SubmissionError(f"failed to start container '{request.id}': {detail}")

        logger.info("Started container %s (%s)", request.id, (result.stdout or "").strip()[:12])
        return request.id

    def stream_logs(
        self,
        request: LogsRequest,
        cancel: threading.Event | None = None,
    ) -> None:
        cmd = ["docker", "logs"]
        if request.follow:
            cmd.append("--follow")
        cmd.append(request.container)
        # docker logs relays raw bytes; width only matters to reformatting backends
        logger.debug("Streaming logs for %s (width=%s)", request.container, request.width)

        try:
            proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as e:
            raise StreamError("Docker not found in PATH. Command: docker logs") from e

        try:
            self._relay(proc, request.writer, cancel)
            returncode = proc.wait()
        except KeyboardInterrupt as e:
            raise CancellationError("log streaming interrupted") from e
        finally:
            _terminate(proc)

        # The log source may exit on the same signal that set the event
        if cancel is not None and cancel.is_set():
            raise CancellationError("log streaming cancelled")
        if returncode != 0:
            raise StreamError(
                f"log stream for '{request.container}' ended with exit code {returncode}"
            )

    @staticmethod
    def _relay(
        proc: subprocess.Popen[bytes],
        writer: IO[Any],
        cancel: threading.Event | None,
    ) -> None:
        """Copy stdout and stderr of the log process to writer until EOF."""
        assert proc.stdout is not None and proc.stderr is not None
        open_fds = {proc.stdout.fileno(), proc.stderr.fileno()}

        while open_fds:
            if cancel is not None and cancel.is_set():
                raise CancellationError("log streaming cancelled")
            # Use select with timeout for interruptibility
            try:
                ready, _, _ = select.select(list(open_fds), [], [], STREAM_POLL_INTERVAL)
            except (ValueError, OSError) as e:
                raise StreamError(f"log stream failed: {e}") from e

            for fd in ready:
                try:
                    data = os.read(fd, STREAM_READ_SIZE)
                except OSError as e:
                    raise StreamError(f"log stream read failed: {e}") from e
                if not data:
                    open_fds.discard(fd)
                    continue
                try:
                    _write_chunk(writer, data)
                except (OSError, ValueError) as e:
                    raise StreamError(f"cannot write log output: {e}") from e
