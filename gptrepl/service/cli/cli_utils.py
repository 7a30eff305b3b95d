# -*- coding: utf-8 -*-
"""Utility helpers shared by the REPL shell.

Functions
---------
- ``parse_verbosity(value)``: Map user strings and synonyms to a canonical
  logging level name.
- ``colorize(text, color, enabled)``: Wrap text in ANSI color sequences.
- ``text_wrap(text, width)``: Greedy word wrap used by ``/help``.
- ``render_context(messages, colors)``: ``[role]`` / content rendering used by
  ``/print``.

Classes
-------
- ``ConsolePrinter``: ``UserPrinter`` writing to stdout/stderr.
"""

from __future__ import annotations

import sys
from typing import Iterable, List, Optional, TextIO

from ...base.models import Message

_ANSI = {
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "bold": "\033[1;37m",
}
_RESET = "\033[0m"


def parse_verbosity(value: str) -> Optional[str]:
    """Parse a user-provided verbosity string into a canonical level.

    Accepted values (case-insensitive):
    - Canonical: DEBUG, INFO, WARNING, ERROR, CRITICAL
    - Synonyms: verbose->DEBUG; warn->WARNING; err->ERROR; silent->CRITICAL

    Returns
    -------
    Optional[str]
        Canonical upper-cased level, or ``None`` if invalid.
    """
    v = value.strip().lower()
    mapping = {
        "verbose": "DEBUG",
        "warn": "WARNING",
        "err": "ERROR",
        "silent": "CRITICAL",
    }
    if v in mapping:
        return mapping[v]
    canon = value.strip().upper()
    if canon in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return canon
    return None


def colorize(text: str, color: str, enabled: bool = True) -> str:
    """Return ANSI-colored text when ``enabled``; unknown colors pass through."""
    if not enabled or color not in _ANSI:
        return text
    return f"{_ANSI[color]}{text}{_RESET}"


def readline_colorize(text: str, color: str, enabled: bool = True) -> str:
    """Like ``colorize`` with the escapes fenced by \\001 and \\002 for readline prompts."""
    if not enabled or color not in _ANSI:
        return text
    return f"\001{_ANSI[color]}\002{text}\001{_RESET}\002"


def text_wrap(text: str, width: int) -> List[str]:
    """Greedy word wrap on whitespace.

    A word is moved to a new line when the current line plus a separating
    space plus the word would exceed ``width``. Words longer than ``width``
    occupy a line of their own.
    """
    lines: List[str] = []
    current = ""
    for word in text.split():
        if current and len(current) + len(word) + 1 > width:
            lines.append(current)
            current = word
        elif current:
            current = f"{current} {word}"
        else:
            current = word
    if current:
        lines.append(current)
    return lines


def render_context(messages: Iterable[Message], colors: bool = False) -> str:
    """Render messages as ``[role]`` header, content and a blank line each."""
    out: List[str] = []
    for msg in messages:
        header = colorize("[", "cyan", colors) + colorize(msg.role, "bold", colors) + colorize("]", "cyan", colors)
        out.append(f"{header}\n{msg.content}\n\n")
    return "".join(out)


class ConsolePrinter:
    """``UserPrinter`` bound to the process streams.

    ``print`` writes verbatim to stdout and flushes so streamed fragments
    appear immediately; ``warn`` and ``error`` write one prefixed line to
    stderr.
    """

    def __init__(self, colors: bool = True, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self.colors = colors
        self._stdout = stdout
        self._stderr = stderr

    @property
    def out(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._stderr or sys.stderr

    def print(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def warn(self, text: str) -> None:
        self.err.write(colorize("Warning: ", "yellow", self.colors) + text + "\n")
        self.err.flush()

    def error(self, text: str) -> None:
        self.err.write(colorize("Error: ", "red", self.colors) + text + "\n")
        self.err.flush()


__all__ = [
    "parse_verbosity",
    "colorize",
    "readline_colorize",
    "text_wrap",
    "render_context",
    "ConsolePrinter",
]
