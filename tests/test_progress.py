"""Tests for runbox.progress module."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from runbox.errors import SubmissionError
from runbox.progress import run_with_progress


class TestRunWithProgress:
    """The progress wrapper is a pass-through."""

    def test_returns_result(self) -> None:
        assert run_with_progress("Starting...", lambda: "abc") == "abc"

    def test_exception_passes_through(self) -> None:
        error = SubmissionError("rejected")

        def fail() -> str:
            raise error

        with pytest.raises(SubmissionError) as exc_info:
            run_with_progress("Starting...", fail)
        assert exc_info.value is error

    def test_spinner_on_terminal(self) -> None:
        with patch("runbox.progress.console") as mock_console:
            mock_console.is_terminal = True
            assert run_with_progress("Starting web...", lambda: "web") == "web"
        mock_console.status.assert_called_once_with("[dim]Starting web...[/dim]")
