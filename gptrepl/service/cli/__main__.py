"""CLI package executable module.

Allows running the REPL via:

    python -m gptrepl.service.cli [flags]
"""

from __future__ import annotations

from . import main


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
