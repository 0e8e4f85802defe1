"""Unit tests for runtime settings overrides."""

import json

import pytest

from quant_cloud_ai import config
from quant_cloud_ai.application.services.settings_service import (
    get_provider_settings,
    update_provider_settings,
)


@pytest.fixture(autouse=True)
def settings_file(tmp_path, monkeypatch):
    path = tmp_path / "data" / "settings.json"
    monkeypatch.setattr(config, "SETTINGS_FILE", path)
    config.get_settings.cache_clear()
    yield path
    config.get_settings.cache_clear()


def test_update_persists_known_keys_only(settings_file):
    result = update_provider_settings({"default_model": "amazon.nova-pro-v1:0", "database_url": "x"})

    assert result["default_model"] == "amazon.nova-pro-v1:0"
    assert json.loads(settings_file.read_text()) == {"default_model": "amazon.nova-pro-v1:0"}


def test_update_clears_cached_settings():
    before = config.get_settings()
    update_provider_settings({"max_tokens": 2048})
    after = config.get_settings()

    assert after is not before
    assert after.max_tokens == 2048


def test_get_provider_settings_lists_overridable_keys():
    assert set(get_provider_settings()) == set(config.OVERRIDABLE_KEYS)
