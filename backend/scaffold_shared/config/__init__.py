"""
Configuration module: Settings, logging.
"""

from scaffold_shared.config.settings import settings, get_settings, DATABASE_URL
from scaffold_shared.config.logging import get_logger, setup_logging

__all__ = [
    # settings
    "settings",
    "get_settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
]
