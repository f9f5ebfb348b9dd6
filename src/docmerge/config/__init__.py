"""
Configuration module for docmerge.

Uses pydantic-settings for environment variable and YAML file loading.
"""

from docmerge.config.settings import Settings
from docmerge.config.sources import ConfigFileError, YamlSettingsSource
from docmerge.config.types import MergeConfig, SearchConfig

__all__ = ["ConfigFileError", "MergeConfig", "SearchConfig", "Settings", "YamlSettingsSource"]
