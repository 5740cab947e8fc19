"""
Configuration management for the ynote command-line tools.
Loads environment variables (and a .env file) and validates required settings.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ynote_client.client import DEFAULT_BASE_URL

# Default access token location
DEFAULT_TOKEN_FILE = Path.home() / ".ynote" / "access_token.json"
DEFAULT_TIMEOUT = 30.0

REQUIRED_KEYS = ("YNOTE_CONSUMER_KEY", "YNOTE_CONSUMER_SECRET")


def get_config(**overrides: Any) -> dict[str, Any]:
    """
    Load configuration from environment variables.
    Non-None keyword overrides (e.g. from command-line options) win over the
    environment. Raises ValueError if required variables are missing.
    """
    load_dotenv()

    config: dict[str, Any] = {
        # Required
        "YNOTE_CONSUMER_KEY": os.getenv("YNOTE_CONSUMER_KEY"),
        "YNOTE_CONSUMER_SECRET": os.getenv("YNOTE_CONSUMER_SECRET"),
        # Optional with defaults
        "YNOTE_BASE_URL": os.getenv("YNOTE_BASE_URL", DEFAULT_BASE_URL),
        "YNOTE_TOKEN_FILE": Path(os.getenv("YNOTE_TOKEN_FILE", str(DEFAULT_TOKEN_FILE))),
        "YNOTE_TIMEOUT": os.getenv("YNOTE_TIMEOUT", str(DEFAULT_TIMEOUT)),
    }
    for key, value in overrides.items():
        if value is not None:
            config[key] = value

    missing = [key for key in REQUIRED_KEYS if not config[key]]
    if missing:
        raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        config["YNOTE_TIMEOUT"] = float(config["YNOTE_TIMEOUT"])
    except ValueError as e:
        raise ValueError(f"YNOTE_TIMEOUT must be a number of seconds: {e}") from e
    config["YNOTE_TOKEN_FILE"] = Path(config["YNOTE_TOKEN_FILE"]).expanduser()

    return config


def validate_config(**overrides: Any) -> bool:
    """
    Validate that all required configuration is present.
    Call this at startup to fail fast if config is incomplete.
    """
    try:
        get_config(**overrides)
        return True
    except ValueError as e:
        print(f"Configuration error: {e}")
        return False
