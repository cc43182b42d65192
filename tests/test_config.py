from __future__ import annotations

import pytest

from geolight.config import DEFAULT_CORS_ORIGINS, DEFAULT_MAX_SAMPLES, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings.log_level == "INFO"
    assert settings.cors_origins == DEFAULT_CORS_ORIGINS
    assert settings.max_samples == DEFAULT_MAX_SAMPLES


def test_environment_overrides():
    settings = load_settings(
        {
            "GEOLIGHT_LOG_LEVEL": "debug",
            "GEOLIGHT_CORS_ORIGINS": "https://a.example, https://b.example,",
            "GEOLIGHT_MAX_SAMPLES": "1000",
        }
    )
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ("https://a.example", "https://b.example")
    assert settings.max_samples == 1000


@pytest.mark.parametrize(
    "environ",
    [
        {"GEOLIGHT_LOG_LEVEL": "chatty"},
        {"GEOLIGHT_MAX_SAMPLES": "many"},
        {"GEOLIGHT_MAX_SAMPLES": "0"},
    ],
)
def test_invalid_settings_are_rejected(environ):
    with pytest.raises(ValueError):
        load_settings(environ)
