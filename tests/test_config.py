from pathlib import Path

import pytest

from insta_scheduler.config import ConfigError, load_settings


def test_missing_credentials_are_fatal() -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_settings({"FB_APP_ID": "app", "FB_APP_SECRET": "  "})
    assert "FB_APP_SECRET" in str(excinfo.value)
    assert "FB_APP_ID" not in str(excinfo.value)


def test_defaults() -> None:
    settings = load_settings({"FB_APP_ID": "app", "FB_APP_SECRET": "secret"})
    assert settings.cors_origins == ["http://localhost:3000"]
    assert settings.accounts_path == Path("/tmp/accounts.json")
    assert settings.schedule_path == Path("/tmp/scheduleData.json")
    assert settings.graph_api_version == "v17.0"
    assert settings.port == 5000


def test_overrides() -> None:
    settings = load_settings(
        {
            "FB_APP_ID": "app",
            "FB_APP_SECRET": "secret",
            "DATA_DIR": "/data",
            "SCHEDULE_FILE": "/elsewhere/schedule.json",
            "CORS_ORIGIN": "https://a.example.com, https://b.example.com",
            "PORT": "8080",
            "GRAPH_TIMEOUT": "5",
        }
    )
    assert settings.accounts_path == Path("/data/accounts.json")
    assert settings.schedule_path == Path("/elsewhere/schedule.json")
    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]
    assert settings.port == 8080
    assert settings.graph_timeout == 5.0


def test_invalid_port_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        load_settings({"FB_APP_ID": "app", "FB_APP_SECRET": "secret", "PORT": "eighty"})


def test_log_level_is_normalised() -> None:
    settings = load_settings({"FB_APP_ID": "app", "FB_APP_SECRET": "secret", "LOG_LEVEL": "debug"})
    assert settings.log_level == "DEBUG"


def test_invalid_log_level_is_a_config_error() -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_settings({"FB_APP_ID": "app", "FB_APP_SECRET": "secret", "LOG_LEVEL": "chatty"})
    assert "LOG_LEVEL" in str(excinfo.value)
