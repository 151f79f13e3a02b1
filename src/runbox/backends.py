"""Container backend registry.

Each backend declares the options it supports through BackendCapabilities,
so the CLI can register backend-specific flags explicitly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .errors import BackendNotFoundError
from .service import ContainerService


@dataclass(frozen=True)
class BackendCapabilities:
    """Optional run features a backend understands."""

    # NIS domain name (--domainname)
    domain_name: bool = False


@dataclass(frozen=True)
class Backend:
    """A registered backend: its capabilities and how to build its service."""

    name: str
    description: str
    capabilities: BackendCapabilities
    factory: Callable[[], ContainerService]


def _docker_factory() -> ContainerService:
    # Lazy import: keeps --help fast
    from .docker import DockerService

    return DockerService()


_BACKENDS: dict[str, Backend] = {}


def register_backend(backend: Backend) -> None:
    """Register (or replace) a backend by name."""
    _BACKENDS[backend.name] = backend


def get_backend(name: str) -> Backend:
    """Look up a registered backend.

    Raises:
        BackendNotFoundError: If no backend has that name.
    """
    try:
        return _BACKENDS[name]
    except KeyError:
        known = ", ".join(sorted(_BACKENDS))
        raise BackendNotFoundError(f"unknown backend '{name}'. Available: {known}") from None


def list_backends() -> list[Backend]:
    """Return registered backends sorted by name."""
    return [_BACKENDS[name] for name in sorted(_BACKENDS)]


register_backend(
    Backend(
        name="docker",
        description="Local Docker engine (docker CLI)",
        capabilities=BackendCapabilities(domain_name=True),
        factory=_docker_factory,
    )
)
