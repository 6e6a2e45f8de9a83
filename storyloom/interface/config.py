"""
User configuration persistence.

Stores console settings like the save directory and log level in a JSON file.
"""

import json
from pathlib import Path
from typing import TypedDict

from ..rules.triggers import MAX_TRIGGER_PASSES


class Config(TypedDict, total=False):
    """User configuration."""
    save_dir: str  # Directory for JsonFileBlobStore slots
    quicksave_key: str  # Slot used by /save and /load
    max_trigger_passes: int  # Cascade limit for trigger sweeps
    log_level: str  # DEBUG, INFO, WARNING, ...


DEFAULT_CONFIG: Config = {
    "save_dir": "saves",
    "quicksave_key": "quicksave",
    "max_trigger_passes": MAX_TRIGGER_PASSES,
    "log_level": "WARNING",
}


def get_config_path(data_dir: Path | str = ".") -> Path:
    """Get path to config file."""
    return Path(data_dir) / ".storyloom_config.json"


def load_config(data_dir: Path | str = ".") -> Config:
    """Load config from file, or return defaults if not found."""
    path = get_config_path(data_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        # Merge with defaults to handle missing keys
        config = DEFAULT_CONFIG.copy()
        if isinstance(saved, dict):
            config.update(saved)
        return config
    except (json.JSONDecodeError, IOError):
        return DEFAULT_CONFIG.copy()


def save_config(config: Config, data_dir: Path | str = ".") -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(data_dir)

    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except IOError:
        return False


def set_save_dir(save_dir: str, data_dir: Path | str = ".") -> None:
    """Save the save-slot directory preference."""
    config = load_config(data_dir)
    config["save_dir"] = save_dir
    save_config(config, data_dir)


def set_log_level(level: str, data_dir: Path | str = ".") -> None:
    """Save log level preference."""
    config = load_config(data_dir)
    config["log_level"] = level.upper()
    save_config(config, data_dir)
