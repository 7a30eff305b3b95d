"""Layered configuration for the REPL.

Merge order (later wins)
------------------------
1. Built-in defaults (``model``, ``max_retries``, ``base_url``)
2. Optional JSON or YAML file pointed to by ``GPTREPL_CONFIG_FILE``
3. Environment variables (``GPTREPL_MODEL``, ``GPTREPL_MAX_RETRIES``,
   ``OPENAI_BASE_URL``)
4. In-code overrides (CLI flags)

Example file::

    model: gpt-4o-mini
    max_retries: 3
    base_url: http://localhost:8080/v1

Public API
----------
* get_app_config(overrides: dict | None = None) -> dict
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..base.logging import get_logger
from .defaults import DEFAULT_MAX_RETRIES, DEFAULT_MODEL
from .env import BASE_URL_ENV, CONFIG_FILE_ENV, MAX_RETRIES_ENV, MODEL_ENV

_logger = get_logger("gptrepl.config")

DEFAULTS: Dict[str, Any] = {
    "model": DEFAULT_MODEL,
    "max_retries": DEFAULT_MAX_RETRIES,
    "base_url": None,
}

ENV_FIELD_MAP = {
    "model": MODEL_ENV,
    "max_retries": MAX_RETRIES_ENV,
    "base_url": BASE_URL_ENV,
}


def _load_external_config() -> Dict[str, Any]:
    path = os.getenv(CONFIG_FILE_ENV)
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            _logger.warning("ignoring unreadable config file %s: %s", path, e)
            data = {}
    if not isinstance(data, dict):
        return {}
    return {k: v for k, v in data.items() if k in DEFAULTS}


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, name in ENV_FIELD_MAP.items():
        val = os.getenv(name)
        if val:
            out[field] = val
    return out


def _coerce(cfg: Dict[str, Any]) -> Dict[str, Any]:
    try:
        cfg["max_retries"] = max(int(cfg["max_retries"]), 0)
    except (TypeError, ValueError):
        _logger.warning("invalid max_retries %r; using %d", cfg["max_retries"], DEFAULT_MAX_RETRIES)
        cfg["max_retries"] = DEFAULT_MAX_RETRIES
    return cfg


def get_app_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the merged application configuration.

    ``None`` values in ``overrides`` are ignored so unset CLI flags never
    mask file or environment settings.
    """
    cfg: Dict[str, Any] = dict(DEFAULTS)
    cfg |= _load_external_config()
    cfg |= _env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return _coerce(cfg)


__all__ = ["DEFAULTS", "get_app_config"]
