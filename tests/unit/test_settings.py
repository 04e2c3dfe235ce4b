"""
Unit tests for settings and API configuration loading.
"""

import pytest

from cost_control.api import api_config as api_config_module
from cost_control.common import settings as settings_module


def test_load_settings_normalizes_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    assert settings_module.load_settings(load_env=False).LOG_LEVEL == "DEBUG"


def test_load_settings_defaults_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert settings_module.load_settings(load_env=False).LOG_LEVEL == "INFO"


def test_load_settings_rejects_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(RuntimeError, match="Invalid environment configuration"):
        settings_module.load_settings(load_env=False)


def test_load_api_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_AUTH_TOKENS", "alpha, beta")
    monkeypatch.setenv("API_MAX_PAGE_SIZE", "40")
    monkeypatch.setenv("API_EXPOSE_ERROR_DETAILS", "yes")

    config = api_config_module.load_api_config(load_env=False)

    assert config.auth_tokens == ["alpha", "beta"]
    assert config.max_page_size == 40
    assert config.expose_error_details is True
    assert config.api_version_label() == "v1"


def test_load_api_config_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL is required"):
        api_config_module.load_api_config(load_env=False)


def test_table_name_override_must_be_safe_identifier(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_COST_FACT_TABLE_NAME", "cost_facts; DROP TABLE projects")
    with pytest.raises(ValueError, match="Unsafe SQL identifier"):
        api_config_module.load_api_config(load_env=False)


def test_validate_table_name_enforces_allowlist() -> None:
    config = api_config_module.load_api_config(load_env=False)
    assert config.validate_table_name("cost_facts") == "cost_facts"
    with pytest.raises(ValueError, match="allowlist"):
        config.validate_table_name("users")
