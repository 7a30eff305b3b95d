"""gptrepl.config.env
==================

Environment variable names and credential resolution.

Purpose
-------
- Single source of truth for the environment variables the REPL reads.
- Resolve the OpenAI API key from the places an operator may have put it,
  in a fixed precedence order.

Failure Modes
-------------
- ``resolve_api_key`` returns ``None`` when no key is found; the CLI prints
  :func:`api_key_help_lines` and exits with status 1.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from .defaults import KEY_FILE_NAME

API_KEY_ENV = "OPENAI_API_KEY"
BASE_URL_ENV = "OPENAI_BASE_URL"
MODEL_ENV = "GPTREPL_MODEL"
MAX_RETRIES_ENV = "GPTREPL_MAX_RETRIES"
CONFIG_FILE_ENV = "GPTREPL_CONFIG_FILE"
TEXT_EDITOR_ENV = "GPTREPL_TEXT_EDITOR"
USE_MOCKS_ENV = "GPTREPL_USE_MOCKS"


def _home() -> Optional[Path]:
    try:
        return Path.home()
    except RuntimeError:
        return None


def key_file_path() -> Optional[Path]:
    home = _home()
    return home / KEY_FILE_NAME if home is not None else None


def resolve_api_key(flag_value: Optional[str] = None) -> Optional[str]:
    """Return the API key to use, or ``None`` when none is configured.

    Precedence: explicit flag value, ``$OPENAI_API_KEY``, then the trimmed
    contents of ``~/.gptrepl-key``.
    """
    if flag_value:
        return flag_value
    env_val = os.getenv(API_KEY_ENV)
    if env_val:
        return env_val
    path = key_file_path()
    if path is None:
        return None
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return None


def api_key_help_lines() -> List[str]:
    """Lines explaining where the key is looked up."""
    home = _home()
    where = f"(currently {home}) " if home is not None else ""
    return [
        "An OpenAI API key was not provided.",
        "gptrepl searches for the key in three places until one is found, in the following order:",
        " - The -apikey command-line flag",
        f" - {API_KEY_ENV} environment variable",
        f' - A file named "{KEY_FILE_NAME}" located in the home directory {where}'
        "containing only a plaintext key in UTF-8 encoding.",
    ]


def use_mocks() -> bool:
    return os.getenv(USE_MOCKS_ENV, "").strip().lower() in {"1", "true", "yes", "on"}


__all__ = [
    "API_KEY_ENV",
    "BASE_URL_ENV",
    "MODEL_ENV",
    "MAX_RETRIES_ENV",
    "CONFIG_FILE_ENV",
    "TEXT_EDITOR_ENV",
    "USE_MOCKS_ENV",
    "key_file_path",
    "resolve_api_key",
    "api_key_help_lines",
    "use_mocks",
]
