"""Tooling helpers: environment and config-path resolution."""

from .env import USER_CONFIG_DIR, get_config_dir, get_default_config_file, load_user_env

__all__ = ["USER_CONFIG_DIR", "get_config_dir", "get_default_config_file", "load_user_env"]
