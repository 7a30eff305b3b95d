from __future__ import annotations

import json
import os
import stat

import pytest

from gptrepl.base.errors import ErrorCode, ReplError
from gptrepl.base.models import Message
from gptrepl.base.persistence import read_context_file, write_context_file


def test_write_then_read_preserves_order_and_content(tmp_path):
    path = tmp_path / "ctx.json"
    messages = [
        Message(role="system", content="be brief"),
        Message(role="user", content="héllo\nworld"),
        Message(role="assistant", content=""),
    ]
    write_context_file(str(path), messages)
    assert read_context_file(str(path)) == messages  # nosec B101


def test_written_file_is_tab_indented_array(tmp_path):
    path = tmp_path / "ctx.json"
    write_context_file(str(path), [Message(role="user", content="hi")])
    text = path.read_text(encoding="utf-8")
    assert text.startswith("[\n\t{")  # nosec B101
    assert json.loads(text) == [{"role": "user", "content": "hi"}]  # nosec B101
    assert not [p for p in os.listdir(tmp_path) if p.endswith(".tmp")]  # nosec B101


def test_invalid_role_reports_index(tmp_path):
    path = tmp_path / "ctx.json"
    path.write_text(
        json.dumps(
            [
                {"role": "user", "content": "a"},
                {"role": "assistant", "content": "b"},
                {"role": "narrator", "content": "c"},
            ]
        ),
        encoding="utf-8",
    )
    with pytest.raises(ReplError) as ei:
        read_context_file(str(path))
    assert ei.value.code is ErrorCode.INVALID_ROLE  # nosec B101
    assert ei.value.index == 2  # nosec B101
    assert str(ei.value) == f'{path}: message #2 (starting from zero) has an invalid "role" attribute'  # nosec B101


def test_missing_role_is_invalid_and_missing_content_is_empty(tmp_path):
    path = tmp_path / "ctx.json"
    path.write_text('[{"role": "user"}, {"content": "x"}]', encoding="utf-8")
    with pytest.raises(ReplError) as ei:
        read_context_file(str(path))
    assert ei.value.index == 1  # nosec B101

    path.write_text('[{"role": "user", "extra": 1}]', encoding="utf-8")
    assert read_context_file(str(path)) == [Message(role="user", content="")]  # nosec B101


@pytest.mark.parametrize("payload", ["{not json", '{"role": "user"}', '[{"role": "user", "content": 5}]', ""])
def test_malformed_files_are_parse_errors(tmp_path, payload):
    path = tmp_path / "ctx.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(ReplError) as ei:
        read_context_file(str(path))
    assert ei.value.code is ErrorCode.PARSE  # nosec B101


def test_null_reads_as_empty(tmp_path):
    path = tmp_path / "ctx.json"
    path.write_text("null", encoding="utf-8")
    assert read_context_file(str(path)) == []  # nosec B101


def test_io_errors(tmp_path):
    with pytest.raises(ReplError) as ei:
        read_context_file(str(tmp_path / "missing.json"))
    assert ei.value.code is ErrorCode.IO  # nosec B101
    with pytest.raises(ReplError) as ei:
        write_context_file(str(tmp_path / "no" / "such" / "dir.json"), [])
    assert ei.value.code is ErrorCode.IO  # nosec B101


def test_unusable_path_and_unencodable_content_are_io_errors(tmp_path):
    with pytest.raises(ReplError) as ei:
        read_context_file(str(tmp_path / "a\x00b"))
    assert ei.value.code is ErrorCode.IO  # nosec B101
    with pytest.raises(ReplError) as ei:
        write_context_file(str(tmp_path / "a\x00b"), [])
    assert ei.value.code is ErrorCode.IO  # nosec B101

    path = tmp_path / "ctx.json"
    with pytest.raises(ReplError) as ei:
        write_context_file(str(path), [Message(role="user", content="bad\udcffbyte")])
    assert ei.value.code is ErrorCode.IO  # nosec B101
    assert not path.exists()  # nosec B101
    assert not [p for p in os.listdir(tmp_path) if p.endswith(".tmp")]  # nosec B101


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_overwrite_keeps_existing_mode(tmp_path):
    path = tmp_path / "ctx.json"
    path.write_text("[]", encoding="utf-8")
    os.chmod(path, 0o644)
    write_context_file(str(path), [Message(role="user", content="hi")])
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o644  # nosec B101
