"""Unit tests for settings.json handling."""

import json
from datetime import date

import pytest

from vnpit.sdk import (
    ConfigError,
    get_config_dir,
    get_default_dependents,
    get_default_region,
    get_law_change_date,
    get_setting,
    get_settings_path,
    get_tax_rules_dir,
    load_settings,
    save_settings,
    set_setting,
    unset_setting,
)


class TestConfigDir:

    def test_env_var_wins(self, isolated_config):
        assert get_config_dir() == isolated_config
        assert get_settings_path() == isolated_config / "settings.json"

    def test_xdg_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("VNPIT_CONFIG_PATH")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert get_config_dir() == tmp_path / "xdg" / "vn-pit"


class TestSettingsFile:

    def test_missing_file_is_empty(self):
        assert load_settings() == {}
        assert get_setting("region", 3) == 3

    def test_save_and_load(self, isolated_config):
        save_settings({"region": 2})

        assert json.loads((isolated_config / "settings.json").read_text()) == {"region": 2}
        assert get_setting("region") == 2

    def test_corrupt_file_is_config_error(self, isolated_config):
        isolated_config.mkdir(parents=True, exist_ok=True)
        (isolated_config / "settings.json").write_text("{not json")

        with pytest.raises(ConfigError, match="not valid JSON"):
            load_settings()

    def test_non_object_rejected(self, isolated_config):
        isolated_config.mkdir(parents=True, exist_ok=True)
        (isolated_config / "settings.json").write_text("[1, 2]")

        with pytest.raises(ConfigError, match="JSON object"):
            get_setting("region")

    def test_unset(self):
        set_setting("region", 2)
        unset_setting("region")
        assert "region" not in load_settings()


class TestSetSetting:

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown setting"):
            set_setting("data_dir", "/tmp")

    @pytest.mark.parametrize("key,value", [
        ("region", 5),
        ("region", "north"),
        ("dependents", -1),
        ("dependents", "two"),
        ("law_change_date", "July 2026"),
        ("tax_rules_dir", "/definitely/not/here"),
    ])
    def test_bad_values_rejected(self, key, value):
        with pytest.raises(ConfigError):
            set_setting(key, value)
        assert key not in load_settings()

    def test_values_stored_as_given(self):
        set_setting("law_change_date", "2026-07-01")
        assert get_setting("law_change_date") == "2026-07-01"


class TestTypedAccessors:

    def test_defaults(self):
        assert get_law_change_date() == date(2026, 1, 1)
        assert get_default_region() == 1
        assert get_default_dependents() == 0
        assert get_tax_rules_dir() is None

    def test_configured_values(self, tmp_path):
        set_setting("law_change_date", "2026-07-01")
        set_setting("region", "3")
        set_setting("dependents", 2)
        set_setting("tax_rules_dir", str(tmp_path))

        assert get_law_change_date() == date(2026, 7, 1)
        assert get_default_region() == 3
        assert get_default_dependents() == 2
        assert get_tax_rules_dir() == tmp_path

    def test_hand_edited_bad_value(self):
        save_settings({"region": 9})
        with pytest.raises(ConfigError):
            get_default_region()
