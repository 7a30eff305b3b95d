"""Session engine scenarios: exchanges, dispatch, forgetful mode, autosave."""

from __future__ import annotations

import json

import pytest

from gptrepl.base.context import ContextStore
from gptrepl.base.errors import ErrorCode, ReplError
from gptrepl.base.models import Message
from gptrepl.mock import ScriptedCompletionClient


def _read(path):
    return [Message(**m) for m in json.loads(path.read_text(encoding="utf-8"))]


def test_plain_line_exchange_appends_both_messages(make_session, printer, line_reader):
    session = make_session()
    session.run(line_reader("  hello  "))
    assert session.context.messages == [  # nosec B101
        Message(role="user", content="hello"),
        Message(role="assistant", content="abc def"),
    ]
    assert printer.output == "abc def\n"  # nosec B101


def test_autosave_mirrors_each_mutation(make_session, tmp_path, line_reader):
    path = tmp_path / "auto.json"
    client = ScriptedCompletionClient(["abc ", "def"])
    session = make_session(client, autosave_path=str(path))
    session.run(line_reader("hello"))
    assert _read(path) == [  # nosec B101
        Message(role="user", content="hello"),
        Message(role="assistant", content="abc def"),
    ]
    assert client.received == [[Message(role="user", content="hello")]]  # nosec B101


def test_failed_exchange_leaves_context_unchanged(make_session, printer, line_reader):
    initial = [Message(role="system", content="s")]
    client = ScriptedCompletionClient(["x"], fail_times=99, error=ReplError(code=ErrorCode.NETWORK, message="down"))
    session = make_session(client, context=ContextStore(initial), max_retries=2)
    session.run(line_reader("question"))
    assert session.context.messages == initial  # nosec B101
    assert printer.errors == ["failed to send context (after 2 retries): down (no changes done to context)"]  # nosec B101
    assert client.calls == 3  # nosec B101


def test_midstream_failure_retracts_user_message(make_session, printer, line_reader):
    client = ScriptedCompletionClient(["abc"], midstream_error=ReplError(code=ErrorCode.NETWORK, message="eof"))
    session = make_session(client)
    session.run(line_reader("question"))
    assert len(session.context) == 0  # nosec B101
    assert printer.errors == ["stream error: eof (no changes done to context)"]  # nosec B101
    assert printer.output == "abc\n"  # nosec B101


def test_forgetful_mode_keeps_context(make_session, line_reader, tmp_path):
    initial = [Message(role="system", content="a")]
    path = tmp_path / "auto.json"
    session = make_session(context=ContextStore(initial), forgetful=True, autosave_path=str(path))
    session.run(line_reader("b"))
    assert session.context.messages == initial  # nosec B101
    assert _read(path) == initial  # nosec B101


def test_forgetful_mode_does_not_affect_escape(make_session, line_reader):
    session = make_session(forgetful=True)
    session.run(line_reader("/escape /literal"))
    assert [m.content for m in session.context] == ["/literal", "abc def"]  # nosec B101


def test_unknown_command_never_mutates_or_sends(make_session, printer, line_reader, tmp_path):
    path = tmp_path / "auto.json"
    client = ScriptedCompletionClient(["x"])
    initial = [Message(role="user", content="u")]
    session = make_session(client, context=ContextStore(initial), autosave_path=str(path))
    session.run(line_reader("/bogus arg"))
    assert printer.errors == ["unknown command: bogus"]  # nosec B101
    assert session.context.messages == initial  # nosec B101
    assert client.calls == 0  # nosec B101
    assert not path.exists()  # nosec B101


def test_commands_disabled_sends_slash_lines(make_session, line_reader):
    client = ScriptedCompletionClient(["r"])
    session = make_session(client, commands_enabled=False)
    session.run(line_reader("/help"))
    assert client.received == [[Message(role="user", content="/help")]]  # nosec B101


def test_handler_errors_are_prefixed_and_loop_continues(make_session, printer, line_reader):
    session = make_session()
    session.run(line_reader("/pop", "/append user hi"))
    assert printer.errors == [  # nosec B101
        "pop: can't pop 2 elements from the context because it only contains 0 elements"
    ]
    assert session.context.messages == [Message(role="user", content="hi")]  # nosec B101


def test_empty_lines_are_ignored(make_session, line_reader):
    client = ScriptedCompletionClient(["x"])
    session = make_session(client)
    session.run(line_reader("", "   "))
    assert client.calls == 0  # nosec B101


@pytest.mark.parametrize(
    "exc",
    [
        OSError("tty gone"),
        UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"),
        ValueError("I/O operation on closed file"),
        KeyboardInterrupt(),
    ],
)
def test_reader_failure_ends_loop(make_session, exc):
    class _Broken:
        def readline(self):
            raise exc

    session = make_session()
    assert session.step(_Broken()) is False  # nosec B101
    session.run(_Broken())


def test_unencodable_autosave_is_reported_and_loop_continues(make_session, printer, line_reader, tmp_path):
    path = tmp_path / "auto.json"
    session = make_session(autosave_path=str(path))
    session.run(line_reader("/append user bad\udcffbyte", "/append user fine"))
    assert [m.content for m in session.context.messages] == ["bad\udcffbyte", "fine"]  # nosec B101
    assert len(printer.errors) == 2  # nosec B101
    assert all(e.startswith(f'failed to write to file "{path}"') for e in printer.errors)  # nosec B101


def test_unusable_path_is_one_command_error(make_session, printer, line_reader):
    initial = [Message(role="user", content="a")]
    session = make_session(context=ContextStore(initial))
    session.run(line_reader("/replacefrom a\x00b", "/save a\x00b"))
    assert session.context.messages == initial  # nosec B101
    assert len(printer.errors) == 2  # nosec B101
    assert printer.errors[0].startswith("replacefrom: ")  # nosec B101
    assert printer.errors[1].startswith("save: ")  # nosec B101


def test_autosave_write_failure_is_reported_not_raised(make_session, printer, tmp_path):
    bad = tmp_path / "missing-dir" / "auto.json"
    session = make_session(autosave_path=str(bad))
    session.context.append(Message(role="user", content="kept"))
    assert session.context.messages == [Message(role="user", content="kept")]  # nosec B101
    assert len(printer.errors) == 1  # nosec B101
    assert printer.errors[0].startswith(f'failed to write to file "{bad}"')  # nosec B101


def test_session_logs_autosave_events(make_session, tmp_path, log_events):
    session = make_session(autosave_path=str(tmp_path / "a.json"))
    session.context.append(Message(role="user", content="x"))
    assert any(e["event"] == "autosave.write" for e in log_events)  # nosec B101
