"""Unit tests for settings."""

import pytest
from pydantic import ValidationError

from callapi.core.config import Settings, get_settings


def test_settings_defaults(monkeypatch):
    for name in ("CALLAPI_LOG_LEVEL", "CALLAPI_HTTP_TIMEOUT", "CALLAPI_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.APP_NAME == "callapi"
    assert settings.LOG_LEVEL == "INFO"
    assert settings.LOG_JSON is False
    assert settings.HTTP_TIMEOUT == 30.0
    assert settings.HTTP_FOLLOW_REDIRECTS is True


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("CALLAPI_HTTP_TIMEOUT", "5")
    monkeypatch.setenv("CALLAPI_LOG_JSON", "true")
    settings = Settings(_env_file=None)
    assert settings.HTTP_TIMEOUT == 5.0
    assert settings.LOG_JSON is True


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, HTTP_TIMEOUT=0)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
