"""gptrepl command-line interface (package entrypoint).

Public API re-exports:
- ``main``: CLI entrypoint callable
- ``ReplSession``: the session engine
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_parser import build_parser
from .cli_shell import ReplSession, handle_shell


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code: ``0`` at end of input, ``1`` on startup failure,
        or the status given to ``/exit``.
    """
    args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    try:
        return handle_shell(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


__all__ = ["main", "ReplSession"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
