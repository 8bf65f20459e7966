"""Configuration module for the E2E suite.

Usage:
    from contests_e2e.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.base_url)
"""

from contests_e2e.config.logging import configure_logging
from contests_e2e.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_settings"]
