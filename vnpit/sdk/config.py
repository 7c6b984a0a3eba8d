"""Configuration management for vn-pit.

Configuration lives in a single settings.json file holding machine-specific
preferences. The CLI applies them when a command does not pass a value;
the SDK itself only reads tax_rules_dir, once, when rule sets are first loaded.

   - law_change_date: date the new PIT schedule takes effect (YYYY-MM-DD)
   - region: minimum-wage region (1-4) used for the unemployment insurance cap
   - dependents: default number of registered dependents
   - tax_rules_dir: directory of user-supplied tax-rules/*.yaml files

Config directory resolution:
1. VNPIT_CONFIG_PATH environment variable (if set)
2. ~/.config/vn-pit/ (XDG_CONFIG_HOME fallback)
"""

import json
import os
from datetime import date
from pathlib import Path
from typing import Any, Optional


APP_NAME = "vn-pit"
SETTINGS_FILENAME = "settings.json"

DEFAULT_REGION = 1

KNOWN_SETTINGS = ("law_change_date", "region", "dependents", "tax_rules_dir")


class ConfigError(Exception):
    """Raised when a setting holds a value the SDK cannot use."""
    pass


def get_config_dir() -> Path:
    """VNPIT_CONFIG_PATH if set, else $XDG_CONFIG_HOME/vn-pit."""
    override = os.environ.get("VNPIT_CONFIG_PATH")
    if override:
        return Path(override)
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / APP_NAME


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Read settings.json; a missing file means no settings.

    Raises:
        ConfigError: The file is not a JSON object
    """
    path = get_settings_path()
    if not path.exists():
        return {}

    with open(path) as f:
        try:
            settings = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{path} is not valid JSON: {e}")

    if not isinstance(settings, dict):
        raise ConfigError(f"{path} must hold a JSON object of settings")
    return settings


def save_settings(settings: dict) -> Path:
    path = get_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(settings, f, indent=2, sort_keys=True)
    return path


def get_setting(key: str, default: Any = None) -> Any:
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    The value is checked with the same parser the SDK uses to read it, so a
    bad value fails here rather than on the next calculation.

    Args:
        key: Setting key (one of KNOWN_SETTINGS)
        value: Value to set

    Returns:
        Path to the saved settings file

    Raises:
        ConfigError: Unknown key or unusable value
    """
    if key not in KNOWN_SETTINGS:
        raise ConfigError(f"Unknown setting '{key}'. Known settings: {', '.join(KNOWN_SETTINGS)}")

    parser = _PARSERS[key]
    parser(value)

    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def unset_setting(key: str) -> Path:
    """Remove a setting so the built-in default applies again."""
    settings = load_settings()
    settings.pop(key, None)
    return save_settings(settings)


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ConfigError(f"law_change_date must be YYYY-MM-DD, got {value!r}")


def _parse_region(value: Any) -> int:
    try:
        region = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"region must be 1-4, got {value!r}")
    if region not in (1, 2, 3, 4):
        raise ConfigError(f"region must be 1-4, got {value!r}")
    return region


def _parse_dependents(value: Any) -> int:
    try:
        dependents = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"dependents must be a non-negative integer, got {value!r}")
    if dependents < 0:
        raise ConfigError(f"dependents must be a non-negative integer, got {value!r}")
    return dependents


def _parse_path(value: Any) -> Path:
    path = Path(str(value)).expanduser()
    if not path.is_dir():
        raise ConfigError(f"tax_rules_dir must be an existing directory: {path}")
    return path


_PARSERS = {
    "law_change_date": _parse_date,
    "region": _parse_region,
    "dependents": _parse_dependents,
    "tax_rules_dir": _parse_path,
}


def get_law_change_date() -> date:
    """Date from which the new-law schedule applies."""
    from .taxes.rules import NEW_LAW_EFFECTIVE_DATE

    value = get_setting("law_change_date")
    if value is None:
        return NEW_LAW_EFFECTIVE_DATE
    return _parse_date(value)


def get_default_region() -> int:
    """Minimum-wage region used when a caller does not pass one."""
    value = get_setting("region")
    if value is None:
        return DEFAULT_REGION
    return _parse_region(value)


def get_default_dependents() -> int:
    """Dependent count used by the CLI when --dependents is not given."""
    value = get_setting("dependents")
    if value is None:
        return 0
    return _parse_dependents(value)


def get_tax_rules_dir() -> Optional[Path]:
    """User-supplied tax rules directory, or None for the bundled rules."""
    value = get_setting("tax_rules_dir")
    if not value:
        return None
    return _parse_path(value)
