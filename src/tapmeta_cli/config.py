"""Configuration management for tapmeta."""

import os
import json


CONFIG_DIR = os.path.expanduser("~/.tapmeta")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

DEFAULT_CONFIG = {
    "toolchain": "go",
    "formula_dir": "Formula",
    "timestamp_source": "committer",
}

ALLOWED_VALUES = {
    "toolchain": ("go", "node", "native"),
    "timestamp_source": ("committer", "author"),
}


def ensure_config_exists():
    """Ensure the configuration directory and file exist."""
    if not os.path.exists(CONFIG_DIR):
        os.makedirs(CONFIG_DIR)

    if not os.path.exists(CONFIG_FILE):
        with open(CONFIG_FILE, "w") as f:
            json.dump(DEFAULT_CONFIG, f, indent=2)


def get_config():
    """Get the current configuration, filled in with defaults.

    Returns:
        dict: Current configuration.
    """
    ensure_config_exists()
    with open(CONFIG_FILE, "r") as f:
        try:
            stored = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid configuration file {CONFIG_FILE}: {e}")

    config = dict(DEFAULT_CONFIG)
    if isinstance(stored, dict):
        config.update(stored)
    return config


def update_config(updates):
    """Update the configuration with new values.

    Args:
        updates (dict): Dictionary of configuration values to update.

    Raises:
        ValueError: If a key is unknown or a value is not allowed.
    """
    for key, value in updates.items():
        if key not in DEFAULT_CONFIG:
            raise ValueError(f"Unknown configuration key: {key}")
        allowed = ALLOWED_VALUES.get(key)
        if allowed and value not in allowed:
            raise ValueError(f"Invalid value '{value}' for {key}. Allowed: {', '.join(allowed)}")

    config = get_config()
    config.update(updates)

    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2)


def get_default_toolchain():
    """Get the toolchain queried for the build host."""
    return get_config().get("toolchain", DEFAULT_CONFIG["toolchain"])


def get_formula_dir():
    """Get the directory formulae are loaded from."""
    return get_config().get("formula_dir", DEFAULT_CONFIG["formula_dir"])


def get_timestamp_source():
    """Get which commit timestamp (committer or author) is used."""
    return get_config().get("timestamp_source", DEFAULT_CONFIG["timestamp_source"])
