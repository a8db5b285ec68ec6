"""
Tests for settings validation.
"""

import pytest
from pydantic import ValidationError

from esm.settings import Settings, clear_settings_cache, get_settings


def test_local_defaults():
    settings = Settings(_env_file=None, env="local")

    assert settings.entu_url == "https://entu.app"
    assert settings.coordinate_tolerance == 0.00001
    assert settings.search_limit == 1000


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("ESM_ENTU_ACCOUNT", "testkonto")
    monkeypatch.setenv("ESM_COORDINATE_TOLERANCE", "0.0001")

    settings = Settings(_env_file=None)

    assert settings.entu_account == "testkonto"
    assert settings.coordinate_tolerance == 0.0001


def test_get_settings_is_cached():
    clear_settings_cache()
    assert get_settings() is get_settings()
    clear_settings_cache()


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"coordinate_tolerance": 0}, "ESM_COORDINATE_TOLERANCE"),
        ({"request_timeout": -1}, "ESM_REQUEST_TIMEOUT"),
        ({"search_limit": 0}, "ESM_SEARCH_LIMIT"),
        ({"entu_url": "entu.app"}, "ESM_ENTU_URL"),
    ],
)
def test_invalid_values(overrides, message):
    with pytest.raises(ValidationError, match=message):
        Settings(_env_file=None, env="local", **overrides)


def test_deployed_env_needs_credentials():
    with pytest.raises(ValidationError, match="ESM_ENTU_KEY or ESM_ENTU_TOKEN"):
        Settings(_env_file=None, env="dev", entu_key="", entu_token="")

    assert Settings(_env_file=None, env="dev", entu_key="key").env == "dev"


def test_prod_rules_are_reported_together():
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, env="prod", entu_key="key", cors_origins=["*"], debug=True)

    message = str(exc_info.value)
    assert "ESM_CORS_ORIGINS" in message
    assert "ESM_DEBUG" in message


def test_prod_ok():
    settings = Settings(
        _env_file=None,
        env="prod",
        entu_token="jwt",
        cors_origins=["https://esmuuseum.ee"],
        debug=False,
    )
    assert settings.env == "prod"
