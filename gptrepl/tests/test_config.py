from __future__ import annotations

import json

import pytest

from gptrepl.config import get_app_config
from gptrepl.config.env import api_key_help_lines, resolve_api_key, use_mocks


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    for name in ("GPTREPL_MODEL", "GPTREPL_MAX_RETRIES", "GPTREPL_CONFIG_FILE", "OPENAI_BASE_URL", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def test_defaults(clean_env):
    assert get_app_config() == {"model": "gpt-4", "max_retries": 5, "base_url": None}  # nosec B101


def test_merge_order_file_env_overrides(clean_env, monkeypatch):
    cfg_file = clean_env / "gptrepl.yaml"
    cfg_file.write_text("model: from-file\nmax_retries: 2\nbase_url: http://file/v1\nunknown: 1\n", encoding="utf-8")
    monkeypatch.setenv("GPTREPL_CONFIG_FILE", str(cfg_file))
    assert get_app_config() == {"model": "from-file", "max_retries": 2, "base_url": "http://file/v1"}  # nosec B101

    monkeypatch.setenv("GPTREPL_MODEL", "from-env")
    monkeypatch.setenv("GPTREPL_MAX_RETRIES", "7")
    cfg = get_app_config({"model": None, "max_retries": 1})
    assert cfg["model"] == "from-env" and cfg["max_retries"] == 1  # nosec B101


def test_json_config_file(clean_env, monkeypatch):
    cfg_file = clean_env / "gptrepl.json"
    cfg_file.write_text(json.dumps({"model": "j"}), encoding="utf-8")
    monkeypatch.setenv("GPTREPL_CONFIG_FILE", str(cfg_file))
    assert get_app_config()["model"] == "j"  # nosec B101


def test_invalid_max_retries_falls_back(clean_env, monkeypatch):
    monkeypatch.setenv("GPTREPL_MAX_RETRIES", "lots")
    assert get_app_config()["max_retries"] == 5  # nosec B101


def test_api_key_precedence(clean_env, monkeypatch):
    (clean_env / ".gptrepl-key").write_text("  from-file \n", encoding="utf-8")
    assert resolve_api_key() == "from-file"  # nosec B101
    monkeypatch.setenv("OPENAI_API_KEY", "from-env")
    assert resolve_api_key() == "from-env"  # nosec B101
    assert resolve_api_key("from-flag") == "from-flag"  # nosec B101


def test_api_key_missing(clean_env):
    assert resolve_api_key() is None  # nosec B101
    assert any(str(clean_env) in line for line in api_key_help_lines())  # nosec B101


def test_use_mocks_toggle(monkeypatch):
    monkeypatch.setenv("GPTREPL_USE_MOCKS", "1")
    assert use_mocks()  # nosec B101
    monkeypatch.setenv("GPTREPL_USE_MOCKS", "0")
    assert not use_mocks()  # nosec B101
