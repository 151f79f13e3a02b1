"""Backend-agnostic container launch and log requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import IO, Any

from .errors import ValidationError


class RestartPolicy(str, Enum):
    """Restart policy applied when a container exits."""

    NONE = "none"
    ALWAYS = "always"
    ON_FAILURE = "on-failure"
    UNLESS_STOPPED = "unless-stopped"

    @classmethod
    def parse(cls, value: str | None) -> RestartPolicy:
        """Resolve a user-supplied policy name, accepting engine aliases.

        Raises:
            ValidationError: If the value is not a recognized policy.
        """
        if not value:
            return cls.NONE
        normalized = value.strip().lower()
        normalized = _RESTART_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValidationError(
                f"invalid restart policy '{value}'. Valid policies: {valid}"
            ) from None


_RESTART_ALIASES: dict[str, str] = {
    "no": RestartPolicy.NONE.value,
    "any": RestartPolicy.ALWAYS.value,
}


@dataclass(frozen=True)
class PortMapping:
    """A single published port."""

    host_port: int
    container_port: int
    protocol: str = "tcp"
    host_ip: str = ""


@dataclass(frozen=True)
class VolumeMount:
    """A volume or bind mount attached to the container."""

    source: str
    target: str
    read_only: bool = False


@dataclass(frozen=True)
class ContainerLaunchRequest:
    """Fully resolved description of a container to start.

    Built once per invocation by RunOptions.to_launch_request() and handed
    to a ContainerService exactly once.
    """

    id: str
    image: str
    command: tuple[str, ...] = ()
    ports: tuple[PortMapping, ...] = ()
    labels: Mapping[str, str] = field(default_factory=dict)
    volumes: tuple[VolumeMount, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)
    cpu_limit: float = 1.0
    memory_limit: int = 0  # bytes, 0 = backend default
    restart_policy: RestartPolicy = RestartPolicy.NONE
    domain_name: str | None = None

    def __post_init__(self) -> None:
        # Read-only copies of the caller's mappings
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "environment", MappingProxyType(dict(self.environment)))


@dataclass(frozen=True)
class LogsRequest:
    """Parameters for streaming a container's output."""

    container: str
    writer: IO[Any]
    follow: bool = False
    width: int | None = None
