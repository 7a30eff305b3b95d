"""Persistent CLI settings for the REPL.

Purpose
-------
Persist operator preferences across sessions (log verbosity, optional log
file, colors, readline history). Settings live under the XDG configuration
directory (``$XDG_CONFIG_HOME/gptrepl/cli.json``, falling back to
``~/.config/gptrepl/cli.json``); log and history files default to the XDG
state directory.

Public API
----------
- ``CLISettings``: settings container.
- ``load_settings()``: load from disk, or defaults on first run.
- ``save_settings(settings)``: persist atomically.
- ``apply_logging(settings)``: reconfigure the shared logger.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Tuple

from ...base import logging as base_logging
from ...base.logging import get_logger, log_event
from .cli_utils import parse_verbosity

CONFIG_DIR_NAME = "gptrepl"
CONFIG_FILE_NAME = "cli.json"
DEFAULT_LOG_FILE = "gptrepl.log"
HISTORY_FILE_NAME = "history"


def _xdg_config_dir() -> Path:
    """Return ``$XDG_CONFIG_HOME/gptrepl`` (``~/.config/gptrepl`` when unset)."""
    root = os.environ.get("XDG_CONFIG_HOME")
    base = Path(root).expanduser() if root else Path.home() / ".config"
    return base / CONFIG_DIR_NAME


def _config_file_path() -> Path:
    return _xdg_config_dir() / CONFIG_FILE_NAME


def _xdg_state_dir() -> Path:
    """Return ``$XDG_STATE_HOME/gptrepl`` (``~/.local/state/gptrepl`` when unset)."""
    root = os.environ.get("XDG_STATE_HOME")
    base = Path(root).expanduser() if root else Path.home() / ".local" / "state"
    return base / CONFIG_DIR_NAME


@dataclass
class CLISettings:
    """Container for CLI user preferences.

    Attributes
    ----------
    verbosity: str
        Logging level name for the shared ``gptrepl`` logger.
    log_to_file: bool
        When ``True``, also write logs to ``log_file_path``.
    log_file_path: str
        Destination of the rotating log file.
    ui_colors: bool
        ANSI colors in prompt, help and diagnostics.
    ui_readline: bool
        Load and persist readline history.
    history_file_path: str
        Readline history file.
    """

    verbosity: str = "WARNING"
    log_to_file: bool = False
    log_file_path: str = field(default_factory=lambda: str(_xdg_state_dir() / DEFAULT_LOG_FILE))
    ui_colors: bool = True
    ui_readline: bool = True
    history_file_path: str = field(default_factory=lambda: str(_xdg_state_dir() / HISTORY_FILE_NAME))


def load_settings() -> CLISettings:
    """Load CLI settings from disk or return defaults if absent or unreadable."""
    defaults = CLISettings()
    cfg_path = _config_file_path()
    if not cfg_path.is_file():
        return defaults
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        get_logger("gptrepl.cli").warning("ignoring unreadable settings file %s: %s", cfg_path, exc)
        return defaults
    if not isinstance(data, dict):
        return defaults
    return CLISettings(
        verbosity=parse_verbosity(str(data.get("verbosity", defaults.verbosity))) or defaults.verbosity,
        log_to_file=bool(data.get("log_to_file", defaults.log_to_file)),
        log_file_path=str(data.get("log_file_path", defaults.log_file_path)),
        ui_colors=bool(data.get("ui_colors", defaults.ui_colors)),
        ui_readline=bool(data.get("ui_readline", defaults.ui_readline)),
        history_file_path=str(data.get("history_file_path", defaults.history_file_path)),
    )


def save_settings(settings: CLISettings) -> Tuple[bool, str | None]:
    """Persist CLI settings atomically.

    Returns
    -------
    (ok, error)
        Tuple indicating success and optional error message.
    """
    try:
        cfg_dir = _xdg_config_dir()
        cfg_dir.mkdir(parents=True, exist_ok=True)
        cfg_path = _config_file_path()
        tmp_path = cfg_path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(asdict(settings), ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, cfg_path)
        return True, None
    except OSError as exc:
        return False, str(exc)


def normalize_log_path(raw_path: str) -> str:
    """Return a concrete log file path.

    An existing directory, or a non-existent path without a suffix, gets the
    default log filename appended.
    """
    p = Path(os.path.expanduser(raw_path))
    if p.is_dir() or (not p.exists() and not p.suffix):
        return str((p / DEFAULT_LOG_FILE).resolve())
    return str(p.resolve())


def apply_logging(settings: CLISettings) -> None:
    """Apply the logging level and optional file handler from ``settings``.

    ``GPTREPL_LOG_LEVEL``, when set, wins over the persisted verbosity.
    """
    env_level = os.getenv(base_logging.LOG_LEVEL_ENV)
    level_name = parse_verbosity(env_level) if env_level else None
    level = getattr(logging, level_name or settings.verbosity.upper(), logging.WARNING)
    file_path: str | None = None
    if settings.log_to_file:
        normalized = normalize_log_path(settings.log_file_path)
        if normalized != settings.log_file_path:
            settings.log_file_path = normalized
            save_settings(settings)
        file_path = normalized
    base_logging.configure_logger(level=level, file_path=file_path)
    log_event(
        get_logger(),
        "cli.options.apply_logging",
        verbosity=logging.getLevelName(level),
        log_to_file=settings.log_to_file,
        log_file_path=file_path,
        level=logging.DEBUG,
    )


__all__ = [
    "CLISettings",
    "load_settings",
    "save_settings",
    "apply_logging",
    "normalize_log_path",
]
