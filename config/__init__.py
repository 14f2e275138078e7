"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    configure_logging: structlog setup used by every entry point
"""

from config.settings import settings, get_settings, Settings
from config.logging import configure_logging

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "configure_logging",
]
