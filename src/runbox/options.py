"""Run options for runbox.

Bundles the run command's CLI arguments into a single immutable object and
translates them into a ContainerLaunchRequest. Translation is pure apart
from reading the declared environment files.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from .config import get_container_name
from .constants import DEFAULT_CPUS, DEFAULT_RESTART_POLICY
from .errors import ValidationError
from .logging import get_logger
from .request import ContainerLaunchRequest, PortMapping, RestartPolicy, VolumeMount

logger = get_logger(__name__)

VALID_PROTOCOLS = frozenset({"tcp", "udp", "sctp"})
MAX_PORT = 65535

_MEMORY_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([kmgtp]?)(i?b)?$", re.IGNORECASE)
_MEMORY_UNITS = "kmgtp"


@dataclass(frozen=True)
class RunOptions:
    """Options for a single `runbox run` invocation.

    Values are kept as the user typed them; validation happens when the
    launch request is built.
    """

    image: str
    command: tuple[str, ...] = ()
    publish: tuple[str, ...] = ()
    name: str | None = None
    labels: tuple[str, ...] = ()
    volumes: tuple[str, ...] = ()
    detach: bool = False
    cpus: float = DEFAULT_CPUS
    memory: str | None = None
    environment: tuple[str, ...] = ()
    env_files: tuple[str, ...] = ()
    restart: str = DEFAULT_RESTART_POLICY
    domain_name: str | None = None

    @classmethod
    def from_cli(
        cls,
        args: Sequence[str],
        *,
        publish: Sequence[str] = (),
        name: str | None = None,
        labels: Sequence[str] = (),
        volumes: Sequence[str] = (),
        detach: bool = False,
        cpus: float = DEFAULT_CPUS,
        memory: str | None = None,
        env: Sequence[str] = (),
        env_files: Sequence[str] = (),
        restart: str = DEFAULT_RESTART_POLICY,
        domain_name: str | None = None,
    ) -> RunOptions:
        """Create RunOptions from positional arguments and CLI flags.

        The first positional argument is the image; any further arguments
        become the command override.

        Raises:
            ValidationError: If no image was given.
        """
        if not args:
            raise ValidationError("an image reference is required")
        return cls(
            image=args[0],
            command=tuple(args[1:]),
            publish=tuple(publish),
            name=name or None,
            labels=tuple(labels),
            volumes=tuple(volumes),
            detach=detach,
            cpus=cpus,
            memory=memory or None,
            environment=tuple(env),
            env_files=tuple(env_files),
            restart=restart,
            domain_name=domain_name or None,
        )

    def to_launch_request(self) -> ContainerLaunchRequest:
        """Build the launch request for these options.

        Raises:
            ValidationError: If any option is malformed or an env file
                cannot be read.
        """
        image = self.image.strip()
        if not image:
            raise ValidationError("image reference cannot be empty")
        if self.cpus <= 0:
            raise ValidationError(f"--cpus must be positive, got {self.cpus}")

        request = ContainerLaunchRequest(
            id=self.name or get_container_name(),
            image=image,
            command=self.command,
            ports=parse_ports(self.publish),
            labels=parse_labels(self.labels),
            volumes=tuple(parse_volume(spec) for spec in self.volumes),
            environment=resolve_environment(self.environment, self.env_files),
            cpu_limit=self.cpus,
            memory_limit=parse_memory(self.memory) if self.memory else 0,
            restart_policy=RestartPolicy.parse(self.restart),
            domain_name=self.domain_name,
        )
        logger.debug(
            "Built launch request: id=%s image=%s ports=%d volumes=%d env=%d",
            request.id,
            request.image,
            len(request.ports),
            len(request.volumes),
            len(request.environment),
        )
        return request


def _parse_port_range(value: str, spec: str) -> tuple[int, int]:
    """Parse `N` or `A-B` into an inclusive (start, end) range."""
    start_str, sep, end_str = value.partition("-")
    try:
        start = int(start_str)
        end = int(end_str) if sep else start
    except ValueError:
        raise ValidationError(f"invalid port '{value}' in publish spec '{spec}'") from None
    if not (1 <= start <= MAX_PORT and 1 <= end <= MAX_PORT):
        raise ValidationError(f"port out of range in publish spec '{spec}'")
    if end < start:
        raise ValidationError(f"invalid port range '{value}' in publish spec '{spec}'")
    return start, end


def parse_port_spec(spec: str) -> list[PortMapping]:
    """Parse `[HOST_IP:][HOST_PORT:]CONTAINER_PORT[/PROTO]`.

    Raises:
        ValidationError: If the spec is malformed.
    """
    rest, sep, protocol = spec.strip().partition("/")
    protocol = protocol.lower() if sep else "tcp"
    if protocol not in VALID_PROTOCOLS:
        raise ValidationError(f"invalid protocol '{protocol}' in publish spec '{spec}'")

    host_ip = ""
    if rest.startswith("["):
        # Bracketed IPv6 host address
        addr, bracket, rest = rest[1:].partition("]")
        if not bracket or not rest.startswith(":"):
            raise ValidationError(f"invalid publish spec '{spec}'")
        host_ip, rest = addr, rest[1:]
        parts = rest.split(":")
        if len(parts) != 2:
            raise ValidationError(f"invalid publish spec '{spec}'")
        host_part, container_part = parts
    else:
        parts = rest.split(":")
        if len(parts) == 1:
            host_part, container_part = "", parts[0]
        elif len(parts) == 2:
            host_part, container_part = parts
        elif len(parts) == 3:
            host_ip, host_part, container_part = parts
        else:
            raise ValidationError(f"invalid publish spec '{spec}'")

    if not container_part:
        raise ValidationError(f"missing container port in publish spec '{spec}'")

    c_start, c_end = _parse_port_range(container_part, spec)
    if host_part:
        h_start, h_end = _parse_port_range(host_part, spec)
    else:
        h_start, h_end = c_start, c_end

    if h_end - h_start != c_end - c_start:
        raise ValidationError(f"host and container port ranges differ in size in '{spec}'")

    return [
        PortMapping(
            host_port=h_start + offset,
            container_port=c_start + offset,
            protocol=protocol,
            host_ip=host_ip,
        )
        for offset in range(c_end - c_start + 1)
    ]


def parse_ports(specs: Sequence[str]) -> tuple[PortMapping, ...]:
    """Parse every --publish spec, preserving order."""
    ports: list[PortMapping] = []
    for spec in specs:
        ports.extend(parse_port_spec(spec))
    return tuple(ports)


def parse_volume(spec: str) -> VolumeMount:
    """Parse `SOURCE[:TARGET][:ro|rw]`.

    Raises:
        ValidationError: If the spec is malformed.
    """
    parts = spec.split(":")
    mode = "rw"
    if len(parts) == 1:
        source, target = parts[0], parts[0]
    elif len(parts) == 2 and parts[1] in ("ro", "rw"):
        source, mode = parts
        target = source
    elif len(parts) == 2:
        source, target = parts
        _check_mount_target(target, spec)
    elif len(parts) == 3:
        source, target, mode = parts
        _check_mount_target(target, spec)
    else:
        raise ValidationError(f"invalid volume spec '{spec}'")

    if not source:
        raise ValidationError(f"missing volume source in '{spec}'")
    if mode not in ("ro", "rw"):
        raise ValidationError(f"invalid volume mode '{mode}' in '{spec}' (expected ro or rw)")
    return VolumeMount(source=source, target=target, read_only=mode == "ro")


def _check_mount_target(target: str, spec: str) -> None:
    if not target.startswith("/"):
        raise ValidationError(f"volume target must be an absolute path in '{spec}'")


def parse_labels(specs: Sequence[str]) -> dict[str, str]:
    """Parse `key=value` label specs. A bare key gets an empty value."""
    labels: dict[str, str] = {}
    for spec in specs:
        key, _, value = spec.partition("=")
        key = key.strip()
        if not key:
            raise ValidationError(f"invalid label '{spec}': empty key")
        labels[key] = value
    return labels


def parse_memory(value: str) -> int:
    """Convert a memory quantity such as `512m` or `1.5GB` to bytes.

    Units are 1024-based.

    Raises:
        ValidationError: If the quantity is malformed or not positive.
    """
    match = _MEMORY_RE.match(value.strip())
    if match is None:
        raise ValidationError(f"invalid memory quantity '{value}'")
    number, unit = match.group(1), match.group(2).lower()
    multiplier = 1024 ** (_MEMORY_UNITS.index(unit) + 1) if unit else 1
    size = int(float(number) * multiplier)
    if size <= 0:
        raise ValidationError(f"memory limit must be positive, got '{value}'")
    return size


def _apply_env(
    target: dict[str, str],
    key: str,
    value: str | None,
    source: str,
    host_env: Mapping[str, str],
) -> None:
    if not key:
        raise ValidationError(f"invalid environment variable in {source}: empty name")
    if value is None:
        # KEY without a value is taken from the invoking environment
        if key not in host_env:
            return
        value = host_env[key]
    target[key] = value


def resolve_environment(
    direct: Sequence[str],
    env_files: Sequence[str],
    host_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge --env values and env files into a single mapping.

    Direct values are applied first, then each file in the order given.
    A later source overrides an earlier one for the same key.

    Raises:
        ValidationError: If an env file is missing or unreadable.
    """
    if host_env is None:
        host_env = os.environ

    env: dict[str, str] = {}
    for spec in direct:
        key, sep, value = spec.partition("=")
        _apply_env(env, key.strip(), value if sep else None, "--env", host_env)

    for env_file in env_files:
        path = Path(env_file)
        if not path.is_file():
            raise ValidationError(f"environment file not found: {env_file}")
        try:
            values = dotenv_values(path, interpolate=False, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"cannot read environment file {env_file}: {e}") from e
        for key, value in values.items():
            _apply_env(env, key, value, env_file, host_env)
        logger.debug("Loaded %d variable(s) from %s", len(values), env_file)

    return env
