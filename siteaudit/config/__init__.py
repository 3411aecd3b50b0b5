"""Configuration module."""

from siteaudit.config.settings import get_config, reset_config

__all__ = ["get_config", "reset_config"]
