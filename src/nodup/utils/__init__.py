"""Utility functions for configuration and logging."""

from nodup.utils.config import Config
from nodup.utils.logger import set_level, setup_logger

__all__ = ["Config", "set_level", "setup_logger"]
