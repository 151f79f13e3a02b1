"""Tests for runbox.request module."""

from __future__ import annotations

import io

import pytest

from runbox.errors import ValidationError
from runbox.request import ContainerLaunchRequest, LogsRequest, RestartPolicy


class TestRestartPolicy:
    """Tests for RestartPolicy.parse."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("none", RestartPolicy.NONE),
            ("no", RestartPolicy.NONE),
            ("", RestartPolicy.NONE),
            (None, RestartPolicy.NONE),
            ("always", RestartPolicy.ALWAYS),
            ("any", RestartPolicy.ALWAYS),
            ("On-Failure", RestartPolicy.ON_FAILURE),
            ("unless-stopped", RestartPolicy.UNLESS_STOPPED),
        ],
    )
    def test_recognized(self, value: str | None, expected: RestartPolicy) -> None:
        assert RestartPolicy.parse(value) is expected

    def test_unknown_lists_valid_values(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RestartPolicy.parse("sometimes")
        assert "on-failure" in str(exc_info.value)


class TestContainerLaunchRequest:
    """Tests for the launch request dataclass."""

    def test_defaults(self) -> None:
        request = ContainerLaunchRequest(id="c1", image="nginx")
        assert request.command == ()
        assert request.ports == ()
        assert request.environment == {}
        assert request.cpu_limit == 1.0
        assert request.memory_limit == 0
        assert request.restart_policy is RestartPolicy.NONE
        assert request.domain_name is None

    def test_frozen(self) -> None:
        request = ContainerLaunchRequest(id="c1", image="nginx")
        with pytest.raises(AttributeError):
            request.image = "alpine"  # type: ignore[misc]

    def test_mappings_read_only(self) -> None:
        request = ContainerLaunchRequest(
            id="c1", image="nginx", labels={"team": "web"}, environment={"MODE": "prod"}
        )
        with pytest.raises(TypeError):
            request.labels["team"] = "ops"  # type: ignore[index]
        with pytest.raises(TypeError):
            request.environment["MODE"] = "dev"  # type: ignore[index]
        assert request.labels == {"team": "web"}
        assert request.environment == {"MODE": "prod"}

    def test_caller_dicts_not_shared(self) -> None:
        labels = {"team": "web"}
        environment = {"MODE": "prod"}
        request = ContainerLaunchRequest(
            id="c1", image="nginx", labels=labels, environment=environment
        )
        labels["team"] = "ops"
        environment["EXTRA"] = "1"
        assert request.labels == {"team": "web"}
        assert request.environment == {"MODE": "prod"}


class TestLogsRequest:
    """Tests for the logs request dataclass."""

    def test_defaults(self) -> None:
        sink = io.StringIO()
        request = LogsRequest(container="c1", writer=sink)
        assert request.follow is False
        assert request.width is None
        assert request.writer is sink
