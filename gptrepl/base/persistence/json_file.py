"""
JSON context file adapter.

Purpose
-------
Read and write the on-disk context format: a JSON array of ``{"role",
"content"}`` objects, tab-indented, UTF-8.

Failure modes
-------------
- Any filesystem error, an unusable path or unencodable content ->
  ``ReplError(IO)``.
- Malformed JSON or wrongly typed fields -> ``ReplError(PARSE)``.
- The first record whose role is outside the closed set ->
  ``ReplError(INVALID_ROLE)`` carrying the zero-based ``index``.

Writes go to a sibling temporary file that is ``os.replace``d over the target
so a crash never leaves a truncated context behind; the target keeps its
permission bits.
"""

from __future__ import annotations

import json
import os
import stat
import tempfile
from typing import List, Sequence

from pydantic import ValidationError

from ..errors import ErrorCode, ReplError
from ..logging import get_logger
from ..models import Message, is_valid_role
from .dto import ContextFileAdapter

_logger = get_logger("gptrepl.persistence")


def read_context_file(path: str) -> List[Message]:
    """Load a context file.

    Parameters
    ----------
    path: str
        Path to the JSON file.

    Returns
    -------
    list[Message]
        The decoded messages, in file order. JSON ``null`` yields ``[]``.

    Raises
    ------
    ReplError
        ``IO``, ``PARSE`` or ``INVALID_ROLE`` as described in the module
        docstring.
    """
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except (OSError, ValueError) as e:
        raise _io_error(path, e) from e

    try:
        records = ContextFileAdapter.validate_json(data)
    except ValidationError as e:
        raise ReplError(code=ErrorCode.PARSE, message=f"{path}: {_first_error(e)}", path=path, raw=e) from e

    messages: List[Message] = []
    for idx, rec in enumerate(records or ()):
        if not is_valid_role(rec.role):
            raise ReplError(
                code=ErrorCode.INVALID_ROLE,
                message=f'{path}: message #{idx} (starting from zero) has an invalid "role" attribute',
                path=path,
                index=idx,
            )
        messages.append(Message(role=rec.role, content=rec.content))  # type: ignore[arg-type]
    return messages


def write_context_file(path: str, messages: Sequence[Message]) -> None:
    """Serialize ``messages`` to ``path`` atomically.

    Raises
    ------
    ReplError
        ``IO`` when the directory is not writable, the rename fails or the
        content cannot be encoded as UTF-8.
    """
    payload = json.dumps([m.to_dict() for m in messages], indent="\t", ensure_ascii=False)
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        mode = _target_mode(path)
        fd, tmp_path = tempfile.mkstemp(prefix=".gptrepl-", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
        tmp_path = None
    except (OSError, ValueError) as e:
        raise _io_error(path, e) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
    _logger.debug("wrote %d messages to %s", len(messages), path)


def _io_error(path: str, exc: Exception) -> ReplError:
    # ValueError covers unencodable content and NUL bytes in the path
    reason = getattr(exc, "strerror", None) or exc
    return ReplError(code=ErrorCode.IO, message=f"{path}: {reason}", path=path, raw=exc)


def _target_mode(path: str) -> int:
    """Permission bits for the file written at ``path``.

    An existing file keeps its mode; a new one gets ``0o666`` minus the umask,
    as ``open`` would give it.
    """
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid context file"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


__all__ = ["read_context_file", "write_context_file"]
