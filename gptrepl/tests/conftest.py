"""Pytest configuration for the gptrepl test suite.

Provides recording collaborators (printer, line reader), a scripted
completion client, a session factory, isolated XDG directories and a
structured-log capture.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Callable, Iterator, List, Optional, Sequence

import pytest

from gptrepl.base.logging import BASE_LOGGER_NAME, LOG_LEVEL_ENV
from gptrepl.base.resilience.retry import RetryConfig
from gptrepl.mock import ScriptedCompletionClient
from gptrepl.service.cli.cli_shell import ReplSession


class RecordingPrinter:
    """``UserPrinter`` that keeps everything it is asked to show."""

    def __init__(self) -> None:
        self.printed: List[str] = []
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def print(self, text: str) -> None:
        self.printed.append(text)

    def warn(self, text: str) -> None:
        self.warnings.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)

    @property
    def output(self) -> str:
        return "".join(self.printed)


class ListLineReader:
    """``LineReader`` replaying fixed lines, then raising ``EOFError``."""

    def __init__(self, lines: Sequence[str]) -> None:
        self._lines = list(lines)

    def readline(self) -> str:
        if not self._lines:
            raise EOFError
        return self._lines.pop(0)


@pytest.fixture()
def printer() -> RecordingPrinter:
    return RecordingPrinter()


@pytest.fixture()
def line_reader() -> Callable[..., ListLineReader]:
    def _make(*lines: str) -> ListLineReader:
        return ListLineReader(lines)

    return _make


@pytest.fixture()
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Replace ``time.sleep`` with a recorder; yields the requested delays."""
    slept: List[float] = []
    monkeypatch.setattr(time, "sleep", lambda s: slept.append(s))
    return slept


@pytest.fixture()
def scripted_client() -> Callable[..., ScriptedCompletionClient]:
    def _make(fragments: Sequence[str] = ("abc ", "def"), **kwargs) -> ScriptedCompletionClient:
        return ScriptedCompletionClient(fragments, **kwargs)

    return _make


@pytest.fixture()
def make_session(printer: RecordingPrinter, no_sleep) -> Callable[..., ReplSession]:
    """Build a ``ReplSession`` wired to the recording printer.

    Retries default to zero so failure paths stay fast; ``editor_text`` feeds
    ``/nano`` and ``/ns``.
    """

    def _make(
        client: Optional[ScriptedCompletionClient] = None,
        *,
        editor_text: str = "",
        max_retries: int = 0,
        **kwargs,
    ) -> ReplSession:
        return ReplSession(
            client or ScriptedCompletionClient(("abc ", "def")),
            printer,
            retry_config=RetryConfig(max_retries=max_retries),
            editor=lambda: editor_text,
            **kwargs,
        )

    return _make


@pytest.fixture()
def xdg_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Point XDG config/state at a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    yield


@pytest.fixture()
def log_events(monkeypatch: pytest.MonkeyPatch) -> Iterator[List[dict]]:
    """Capture structured events emitted on the ``gptrepl`` logger tree."""
    monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")
    events: List[dict] = []
    handler = logging.Handler(level=logging.DEBUG)

    def _emit(record: logging.LogRecord) -> None:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            return
        if isinstance(payload, dict):
            events.append(payload)

    handler.emit = _emit  # type: ignore[assignment]
    base = logging.getLogger(BASE_LOGGER_NAME)
    prev_level = base.level
    base.setLevel(logging.DEBUG)
    base.addHandler(handler)
    try:
        yield events
    finally:
        base.removeHandler(handler)
        base.setLevel(prev_level)
