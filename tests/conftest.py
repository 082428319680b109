from __future__ import annotations

import pytest

from use_aws_mcp import config
from use_aws_mcp.policy import classifier


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's .env and exported overrides out of unit tests.
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    for key in config.ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    config._load_settings_cached.cache_clear()
    classifier.get_classifier.cache_clear()
    yield
    config._load_settings_cached.cache_clear()
    classifier.get_classifier.cache_clear()
