"""
Configuration helpers for nestview.
"""

from .models import ConfigError, HeadEntry, SiteConfig, load_config
from .settings import Settings, get_settings

__all__ = ["ConfigError", "HeadEntry", "SiteConfig", "load_config", "Settings", "get_settings"]
