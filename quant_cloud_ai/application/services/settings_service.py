"""Application service for runtime provider settings.

Reads/writes overrides to a JSON file so changes made from the settings
endpoint or the OAuth callback persist across restarts. The file is
merged over the environment by ``Settings.model_post_init``.
"""

import json
import logging
from typing import Any

from quant_cloud_ai import config
from quant_cloud_ai.config import OVERRIDABLE_KEYS, get_settings

logger = logging.getLogger(__name__)


def _read_overrides() -> dict[str, Any]:
    """Read the JSON overrides file, returning {} if missing or corrupt."""
    if not config.SETTINGS_FILE.exists():
        return {}
    try:
        return json.loads(config.SETTINGS_FILE.read_text("utf-8"))
    except Exception:
        logger.warning("Could not read %s — using defaults", config.SETTINGS_FILE)
        return {}


def _write_overrides(data: dict[str, Any]) -> None:
    """Persist overrides to the JSON file."""
    config.SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    config.SETTINGS_FILE.write_text(json.dumps(data, indent=2), encoding="utf-8")


def get_provider_settings() -> dict[str, Any]:
    """Return the effective value of every runtime-overridable setting."""
    settings = get_settings()
    return {key: getattr(settings, key) for key in sorted(OVERRIDABLE_KEYS)}


def update_provider_settings(updates: dict[str, Any]) -> dict[str, Any]:
    """Persist setting overrides and return the new effective values.

    Only keys in OVERRIDABLE_KEYS are accepted; unknown keys are ignored.
    After writing, the Settings LRU cache is cleared so subsequent
    service instantiations pick up the new values.
    """
    overrides = _read_overrides()
    for key in OVERRIDABLE_KEYS:
        if key in updates:
            overrides[key] = updates[key]
    _write_overrides(overrides)

    get_settings.cache_clear()

    logger.info(
        "Provider settings updated: %s",
        sorted(key for key in updates if key in OVERRIDABLE_KEYS),
    )
    return get_provider_settings()
