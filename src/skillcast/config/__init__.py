"""
Configuration module for skillcast.

Uses pydantic-settings for environment variable loading.
"""

from skillcast.config.settings import Settings, find_project_root
from skillcast.config.sources import ConfigFileError

__all__ = ["ConfigFileError", "Settings", "find_project_root"]
