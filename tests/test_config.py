"""Configuration parsing tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from echomind_workbench.config import DEFAULT_LAUNCH_BASE_URL, DEFAULT_STORE_PATH, ConfigError, get_config

_ENV_NAMES = (
    "ECHOMIND_STORE_PATH",
    "ECHOMIND_SIMULATION_MODE",
    "ECHOMIND_RETRY_BASE_DELAY",
    "ECHOMIND_TOAST_LIFETIME",
    "ECHOMIND_REQUEST_TIMEOUT",
    "VAULT_ENDPOINT_URL",
    "REWRITER_ENDPOINT_URL",
    "LAUNCH_BASE_URL",
    "OPENAI_API_KEY",
    "REWRITE_LLM_MODEL",
)


def _clear_env(monkeypatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_get_config_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    config = get_config()

    assert config.store_path == DEFAULT_STORE_PATH
    assert config.simulation_mode == "dry"
    assert config.retry_base_delay == 0.15
    assert config.toast_lifetime == 5.0
    assert config.vault_endpoint_url is None
    assert config.rewriter_endpoint_url is None
    assert config.launch_base_url == DEFAULT_LAUNCH_BASE_URL
    assert config.openai_api_key is None


def test_get_config_reads_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("ECHOMIND_STORE_PATH", str(tmp_path / "store.json"))
    monkeypatch.setenv("ECHOMIND_SIMULATION_MODE", "Healing")
    monkeypatch.setenv("ECHOMIND_RETRY_BASE_DELAY", "0.5")
    monkeypatch.setenv("VAULT_ENDPOINT_URL", "https://example.test/api/vault")
    monkeypatch.setenv("REWRITE_LLM_MODEL", "test-model")

    config = get_config()

    assert config.store_path == Path(tmp_path / "store.json")
    assert config.simulation_mode == "healing"
    assert config.retry_base_delay == 0.5
    assert config.vault_endpoint_url == "https://example.test/api/vault"
    assert config.rewrite_model == "test-model"


def test_get_config_loads_dotenv_without_overriding_env(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    (tmp_path / ".env").write_text(
        "# local settings\n"
        "ECHOMIND_SIMULATION_MODE='live'\n"
        'REWRITER_ENDPOINT_URL="https://example.test/api/rewriter"\n'
        "ECHOMIND_TOAST_LIFETIME=9\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ECHOMIND_TOAST_LIFETIME", "2")
    # Register the .env keys with monkeypatch so they are restored afterwards.
    monkeypatch.setenv("ECHOMIND_SIMULATION_MODE", "")
    monkeypatch.setenv("REWRITER_ENDPOINT_URL", "")
    monkeypatch.delenv("ECHOMIND_SIMULATION_MODE")
    monkeypatch.delenv("REWRITER_ENDPOINT_URL")

    config = get_config()

    assert config.simulation_mode == "live"
    assert config.rewriter_endpoint_url == "https://example.test/api/rewriter"
    assert config.toast_lifetime == 2.0


def test_get_config_rejects_unknown_mode(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("ECHOMIND_SIMULATION_MODE", "turbo")

    with pytest.raises(ConfigError, match="ECHOMIND_SIMULATION_MODE"):
        get_config()


@pytest.mark.parametrize("value", ["abc", "-1"])
def test_get_config_rejects_invalid_delay(monkeypatch, tmp_path, value: str) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("ECHOMIND_RETRY_BASE_DELAY", value)

    with pytest.raises(ConfigError, match="ECHOMIND_RETRY_BASE_DELAY"):
        get_config()


def test_config_repr_redacts_api_key(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")

    config = get_config()

    assert config.openai_api_key == "sk-secret"
    assert "sk-secret" not in repr(config)
    assert "***REDACTED***" in repr(config)
