"""Shared fixtures: every test runs against an empty config directory."""

import pytest

from vnpit.sdk.taxes import clear_rules_cache


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point VNPIT_CONFIG_PATH at a temp dir and reset cached rule sets."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("VNPIT_CONFIG_PATH", str(config_dir))
    clear_rules_cache()
    yield config_dir
    clear_rules_cache()
