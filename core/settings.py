"""
User settings stored as JSON in ~/.yogaflow/settings.json.
"""
import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from core.constants import APP_DIR_NAME, SPEED_DEFAULT, SPEED_OPTIONS, TICK_INTERVAL

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "playback": {
        "speed": SPEED_DEFAULT,
        "tick_interval": TICK_INTERVAL,
        "narration_enabled": True,
    },
    "storage": {
        "store_dir": f"~/{APP_DIR_NAME}/sequences",
    },
    "video": {
        "ui_scale": 1.0,
    },
}


def default_settings_path() -> Path:
    return Path.home() / APP_DIR_NAME / "settings.json"


def load_settings(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings, merged over the defaults.

    A missing file is created with the defaults. An unreadable file leaves
    the defaults in effect.

    Args:
        config_path: Settings file (default ~/.yogaflow/settings.json)

    Returns:
        Settings dictionary grouped by category
    """
    config_path = Path(config_path) if config_path is not None else default_settings_path()
    settings = copy.deepcopy(DEFAULT_SETTINGS)

    if not config_path.exists():
        try:
            save_settings(settings, config_path)
            print("[SETTINGS] Created new settings file with defaults")
        except IOError as e:
            print(f"[SETTINGS] Failed to save default settings: {e}")
        return settings

    try:
        with open(config_path, "r") as f:
            loaded = json.load(f)
    except Exception as e:
        print(f"[SETTINGS] Failed to load settings: {e}")
        return settings

    if not isinstance(loaded, dict):
        print("[SETTINGS] Ignoring settings file: top level must be an object")
        return settings

    for category, values in loaded.items():
        if category in settings and isinstance(values, dict):
            settings[category].update(values)
        elif category not in settings:
            # Keep categories this version does not know about
            settings[category] = values

    if settings["playback"].get("speed") not in SPEED_OPTIONS:
        print(f"[SETTINGS] Unsupported playback speed {settings['playback'].get('speed')!r}, "
              f"using {SPEED_DEFAULT}")
        settings["playback"]["speed"] = SPEED_DEFAULT

    tick_interval = settings["playback"].get("tick_interval")
    if isinstance(tick_interval, bool) or not isinstance(tick_interval, (int, float)) or tick_interval <= 0:
        print(f"[SETTINGS] Invalid tick interval {tick_interval!r}, using {TICK_INTERVAL}")
        settings["playback"]["tick_interval"] = TICK_INTERVAL

    return settings


def save_settings(settings: Dict[str, Any], config_path: Optional[Path] = None):
    """
    Save settings to the config file.

    Raises:
        IOError: If the file cannot be written
    """
    config_path = Path(config_path) if config_path is not None else default_settings_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(settings, f, indent=2)
    except OSError as e:
        raise IOError(f"Failed to save settings to {config_path}: {e}") from e
