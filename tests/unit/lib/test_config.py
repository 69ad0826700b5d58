"""Config layering: defaults, AGENCY_* environment, config.yaml."""

import pytest

from agency import config, paths


def test_defaults(agency_home):
    assert config.get("session_ttl_minutes") == 60
    assert config.get("daily_token_limit") == 2143
    assert config.get("poll_interval_seconds") == 0.5


def test_env_override_is_coerced(agency_home, monkeypatch):
    monkeypatch.setenv("AGENCY_SESSION_TTL_MINUTES", "15")
    monkeypatch.setenv("AGENCY_POLL_INTERVAL_SECONDS", "0.25")
    config.clear_cache()

    assert config.get("session_ttl_minutes") == 15
    assert config.get("poll_interval_seconds") == 0.25


def test_invalid_env_value(agency_home, monkeypatch):
    monkeypatch.setenv("AGENCY_DAILY_TOKEN_LIMIT", "lots")
    config.clear_cache()

    with pytest.raises(ValueError, match="AGENCY_DAILY_TOKEN_LIMIT"):
        config.load_config()


def test_yaml_override(agency_home):
    paths.config_file().write_text("daily_token_limit: 5000\nspawn_log_limit: 10\n")
    config.clear_cache()

    assert config.get("daily_token_limit") == 5000
    assert config.get("spawn_log_limit") == 10


def test_yaml_must_be_mapping(agency_home):
    paths.config_file().write_text("- just\n- a list\n")
    config.clear_cache()

    with pytest.raises(ValueError, match="dict"):
        config.load_config()


def test_init_config_creates_once(agency_home):
    assert config.init_config() is True
    assert paths.config_file().exists()
    assert config.init_config() is False


def test_initialized_config_keeps_defaults(agency_home):
    config.init_config()
    config.clear_cache()

    assert config.load_config() == config.DEFAULT_CONFIG
