"""Configuration management for nodup."""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from nodup.utils.logger import setup_logger

logger = setup_logger(__name__)


class Config:
    """Manages user configuration and settings."""

    DEFAULT_CONFIG_DIR = Path.home() / ".nodup"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"
    DEFAULT_BIN_ROOT = Path.home() / "nodup" / "bin"
    DEFAULT_OPERATIONS_LOG = DEFAULT_CONFIG_DIR / "operations.log"

    DEFAULT_SETTINGS: Dict[str, Any] = {
        "detector": "verified",  # exact, hash, verified
        "bucketing": "discriminator",  # discriminator, dimension
        "max_workers": 1,
        "scan": {
            "recursive": True,
            "skip_hidden": True,
            "images_only": False,
        },
        "bin": {
            "root": str(DEFAULT_BIN_ROOT),
            "operations_log": str(DEFAULT_OPERATIONS_LOG),
        },
    }

    def __init__(self, config_file: Optional[Path] = None, persist: bool = True):
        """
        Initialize configuration.

        Args:
            config_file: Path to config file (default: ~/.nodup/config.json)
            persist: Write the file back on changes and create it when missing
        """
        self.config_file = config_file or self.DEFAULT_CONFIG_FILE
        self.persist = persist
        self.settings: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file or create with defaults."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    self.settings = json.load(f)
                logger.debug(f"Loaded configuration from {self.config_file}")
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid config file: {e}. Using defaults.")
                self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        else:
            logger.debug("No config file found. Using defaults.")
            self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
            self.save()

    def save(self) -> None:
        """Save configuration to file."""
        if not self.persist:
            return
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self.settings, f, indent=2)
        logger.debug(f"Saved configuration to {self.config_file}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Values missing from the loaded settings fall back to the built-in
        defaults before falling back to ``default``.

        Args:
            key: Configuration key (supports dot notation, e.g., 'bin.root')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._lookup(self.settings, key)
        if value is None:
            value = self._lookup(self.DEFAULT_SETTINGS, key)
        return default if value is None else value

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
            save: Write the change to the config file (False for one-off overrides)
        """
        keys = key.split(".")
        target = self.settings
        for k in keys[:-1]:
            if k not in target or not isinstance(target[k], dict):
                target[k] = {}
            target = target[k]
        target[keys[-1]] = value
        if save:
            self.save()

    def get_bin_root(self) -> Path:
        """Get the bin root directory path."""
        return Path(self.get("bin.root")).expanduser()

    def get_operations_log(self) -> Optional[Path]:
        """Get the operations log file path, or None when disabled."""
        log = self.get("bin.operations_log")
        return Path(log).expanduser() if log else None

    @staticmethod
    def _lookup(settings: Dict[str, Any], key: str) -> Any:
        value: Any = settings
        for k in key.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(k)
            if value is None:
                return None
        return value
