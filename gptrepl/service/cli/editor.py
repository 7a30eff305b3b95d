"""External text editor integration for ``/nano`` and ``/ns``.

The editor is ``$GPTREPL_TEXT_EDITOR`` (default ``nano``), started on an
empty temporary file with the terminal attached. The file is removed
afterwards whatever happens.
"""

from __future__ import annotations

import os
import subprocess
import tempfile
from typing import Optional

from ...base.errors import ErrorCode, ReplError
from ...config.defaults import DEFAULT_TEXT_EDITOR
from ...config.env import TEXT_EDITOR_ENV


def editor_command() -> str:
    return os.getenv(TEXT_EDITOR_ENV) or DEFAULT_TEXT_EDITOR


def present_text_editor(editor: Optional[str] = None) -> str:
    """Open the editor on a scratch file and return what was saved.

    Raises
    ------
    ReplError
        ``IO`` when the scratch file cannot be created or read, or the editor
        cannot be started or exits with a non-zero status.
    """
    try:
        fd, path = tempfile.mkstemp(prefix="gptrepl")
        os.close(fd)
    except OSError as e:
        raise ReplError(code=ErrorCode.IO, message=f"failed to create temporary file: {e}", raw=e) from e
    try:
        try:
            subprocess.run([editor or editor_command(), path], check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise ReplError(code=ErrorCode.IO, message=f"text editor failed to run: {e}", raw=e) from e
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ReplError(code=ErrorCode.IO, message=f"can't read temporary file: {e}", path=path, raw=e) from e
    finally:
        if os.path.exists(path):
            os.unlink(path)


__all__ = ["editor_command", "present_text_editor"]
