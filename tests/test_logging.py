"""Tests for runbox debug logging."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from runbox.backends import Backend, BackendCapabilities
from runbox.cli import cli
from runbox.logging import DEBUG_ENV_VAR, configure_logging, get_logger
from runbox.request import ContainerLaunchRequest, LogsRequest


class QuietService:
    """Accepts every request without doing anything."""

    def submit(
        self,
        request: ContainerLaunchRequest,
        cancel: threading.Event | None = None,
    ) -> str:
        return request.id

    def stream_logs(
        self,
        request: LogsRequest,
        cancel: threading.Event | None = None,
    ) -> None:
        return None


@pytest.fixture(autouse=True)
def _reset_level(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv(DEBUG_ENV_VAR, raising=False)
    yield
    configure_logging()


def _run_detached(*global_args: str, env: dict[str, str] | None = None):
    backend = Backend(
        name="fake",
        description="test double",
        capabilities=BackendCapabilities(),
        factory=QuietService,
    )
    with patch("runbox.cli.get_backend", return_value=backend):
        return CliRunner().invoke(
            cli,
            ["--backend", "fake", *global_args, "run", "--name", "web", "-d", "nginx"],
            env=env,
        )


def _attach_messages(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [
        record.getMessage()
        for record in caplog.records
        if record.name == "runbox.attach" and record.levelno == logging.DEBUG
    ]


class TestDebugFlag:
    """The --debug flag exposes the run's state transitions."""

    def test_debug_shows_attach_transitions(self, caplog: pytest.LogCaptureFixture) -> None:
        result = _run_detached("--debug")

        assert result.exit_code == 0, result.output
        assert _attach_messages(caplog) == [
            "Attach state: pending -> submitting",
            "Attach state: submitting -> detached",
        ]

    def test_debug_shows_launch_request(self, caplog: pytest.LogCaptureFixture) -> None:
        _run_detached("--debug")
        built = [r for r in caplog.records if r.name == "runbox.options"]
        assert built
        assert "id=web image=nginx" in built[0].getMessage()

    def test_quiet_by_default(self, caplog: pytest.LogCaptureFixture) -> None:
        result = _run_detached()

        assert result.exit_code == 0, result.output
        assert _attach_messages(caplog) == []
        assert logging.getLogger("runbox").level == logging.WARNING

    def test_env_var_enables_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        result = _run_detached(env={DEBUG_ENV_VAR: "1"})

        assert result.exit_code == 0, result.output
        assert "Attach state: submitting -> detached" in _attach_messages(caplog)

    def test_debug_does_not_leak_into_next_run(self, caplog: pytest.LogCaptureFixture) -> None:
        _run_detached("--debug")
        caplog.clear()

        _run_detached()
        assert _attach_messages(caplog) == []


class TestConfigureLogging:
    """Tests for configure_logging level selection."""

    def test_flag(self) -> None:
        configure_logging(True)
        assert logging.getLogger("runbox").level == logging.DEBUG

    @pytest.mark.parametrize("value", ["1", "true", "YES"])
    def test_env_values_enabling_debug(
        self, value: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(DEBUG_ENV_VAR, value)
        configure_logging()
        assert logging.getLogger("runbox").level == logging.DEBUG

    @pytest.mark.parametrize("value", ["0", "", "verbose"])
    def test_env_values_ignored(self, value: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DEBUG_ENV_VAR, value)
        configure_logging()
        assert logging.getLogger("runbox").level == logging.WARNING

    def test_warnings_still_reach_handlers(self, caplog: pytest.LogCaptureFixture) -> None:
        configure_logging()
        get_logger("runbox.docker").warning("docker daemon slow")
        get_logger("runbox.docker").debug("docker run ...")
        assert [r.getMessage() for r in caplog.records] == ["docker daemon slow"]


class TestGetLogger:
    """Tests for logger namespacing."""

    def test_module_name_kept(self) -> None:
        assert get_logger("runbox.attach").name == "runbox.attach"

    def test_foreign_name_prefixed(self) -> None:
        assert get_logger("plugins.k8s").name == "runbox.plugins.k8s"

    def test_similar_prefix_is_not_namespace(self) -> None:
        assert get_logger("runboxer").name == "runbox.runboxer"

    def test_module_loggers_share_runbox_parent(self) -> None:
        assert get_logger("runbox.docker").parent is logging.getLogger("runbox")
