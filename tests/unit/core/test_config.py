
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lunarconsole.core.config import Settings, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    settings = Settings()

    assert settings.app_name == "LunarBase Console"
    assert settings.environment == "development"
    assert settings.api_base_url == "http://localhost:3000/api"
    assert settings.api_token is None
    assert settings.request_timeout_seconds == 30
    assert settings.cache_ttl_seconds == 300
    assert settings.default_page_size == 20
    assert settings.is_development is True
    assert settings.is_production is False


def test_settings_env_override():
    """Test that environment variables override defaults."""
    with patch.dict(os.environ, {
        "LUNARCONSOLE_ENVIRONMENT": "production",
        "LUNARCONSOLE_API_BASE_URL": "https://lunar.example.com/api/",
        "LUNARCONSOLE_API_TOKEN": "secret-token",
        "LUNARCONSOLE_CACHE_TTL_SECONDS": "60",
    }):
        settings = Settings()

        assert settings.environment == "production"
        assert settings.api_base_url == "https://lunar.example.com/api"
        assert settings.api_token == "secret-token"
        assert settings.cache_ttl_seconds == 60
        assert settings.is_production is True


def test_durations_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(request_timeout_seconds=0)

    with pytest.raises(ValidationError):
        Settings(cache_ttl_seconds=-5)


def test_invalid_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="VERBOSE")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()

    get_settings.cache_clear()
    with patch.dict(os.environ, {"LUNARCONSOLE_DEFAULT_PAGE_SIZE": "50"}):
        assert get_settings().default_page_size == 50
