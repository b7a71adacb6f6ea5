"""Configuration module for ArtistPulse.

Centralized settings through pydantic-settings: every delay, retry count,
default value and locator chain can be overridden from the environment.
"""

from config.settings import GlobalConfig, get_config

__all__ = ["GlobalConfig", "get_config"]
