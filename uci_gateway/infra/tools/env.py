"""Environment configuration and loading for uci-gateway.

Centralizes config paths and dotenv loading. Call load_user_env() before
reading configuration from the environment.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# User config directory (stores .env and the default engine.yaml)
USER_CONFIG_DIR = Path.home() / ".config" / "uci-gateway"


def get_config_dir() -> Path:
    """Get the config directory, respecting UCI_GATEWAY_CONFIG_DIR.

    Evaluated at call time, so it respects values loaded from .env via
    load_user_env().
    """
    return Path(os.environ.get("UCI_GATEWAY_CONFIG_DIR", str(USER_CONFIG_DIR)))


def get_default_config_file() -> Path:
    """Path of the YAML config file used when --config is not given."""
    return get_config_dir() / "engine.yaml"


def load_user_env() -> None:
    """Load environment from the user config directory.

    Loads .env from get_config_dir() (typically ~/.config/uci-gateway/.env).
    Variables already set in the process environment take precedence.
    """
    load_dotenv(dotenv_path=get_config_dir() / ".env")
