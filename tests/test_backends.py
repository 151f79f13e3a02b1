"""Tests for runbox.backends module."""

from __future__ import annotations

import pytest

from runbox.backends import (
    Backend,
    BackendCapabilities,
    get_backend,
    list_backends,
    register_backend,
)
from runbox.docker import DockerService
from runbox.errors import BackendNotFoundError, ConfigError


class TestRegistry:
    """Tests for the backend registry."""

    def test_docker_registered(self) -> None:
        backend = get_backend("docker")
        assert backend.capabilities == BackendCapabilities(domain_name=True)
        assert isinstance(backend.factory(), DockerService)

    def test_unknown_backend(self) -> None:
        with pytest.raises(BackendNotFoundError) as exc_info:
            get_backend("does-not-exist")
        assert "docker" in str(exc_info.value)

    def test_unknown_backend_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            get_backend("does-not-exist")

    def test_register_and_list(self) -> None:
        backend = Backend(
            name="zz-test",
            description="test backend",
            capabilities=BackendCapabilities(domain_name=True),
            factory=DockerService,
        )
        register_backend(backend)
        assert get_backend("zz-test") is backend
        names = [b.name for b in list_backends()]
        assert names == sorted(names)
        assert "zz-test" in names
