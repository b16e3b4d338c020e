"""Configuration loading (TOML) and logging setup."""

from pnpmarkets.config.settings import Settings, configure_logging, get_settings, load_config

__all__ = ["Settings", "configure_logging", "get_settings", "load_config"]
