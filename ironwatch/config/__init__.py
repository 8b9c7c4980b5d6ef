"""Configuration module: exports Settings and load_config."""

from ironwatch.config.loader import load_config
from ironwatch.config.settings import Settings

__all__ = ["Settings", "load_config"]
