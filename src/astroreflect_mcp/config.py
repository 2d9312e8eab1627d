"""Configuration management for astroreflect-mcp."""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


class ConfigManager:
    """Manages configuration for the transit engine and server."""

    # Default config location
    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "astroreflect-mcp"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

    # Overrides ephemeris_path when set
    EPHE_PATH_ENV = "SE_EPHE_PATH"

    # Default configuration
    DEFAULT_CONFIG = {
        "ephemeris_path": None,  # None = built-in Moshier
        "search_steps": 20,
        "active_window_days": 7,
        "current_day_range": 3,
        "sample_day_range": 5,
        "log_level": "INFO",
    }

    DAY_RANGE_KEYS = ("active_window_days", "current_day_range", "sample_day_range")

    VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Optional custom config file path
        """
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_FILE
        self.config = self._load_or_create()

    def _load_or_create(self) -> Dict[str, Any]:
        """Load existing config or create default."""
        if self.config_path.exists():
            return self._load()
        else:
            # Create directory if needed
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self._save(self.DEFAULT_CONFIG)
            return self.DEFAULT_CONFIG.copy()

    def _load(self) -> Dict[str, Any]:
        """Load config from file."""
        try:
            with open(self.config_path, 'r') as f:
                config = json.load(f)
                # Merge with defaults (in case new keys were added)
                merged = self.DEFAULT_CONFIG.copy()
                merged.update(config)
                return merged
        except (json.JSONDecodeError, IOError) as e:
            raise ValueError(f"Failed to load config from {self.config_path}: {e}")

    def _save(self, config: Dict[str, Any]) -> None:
        """Save config to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            raise ValueError(f"Failed to save config to {self.config_path}: {e}")

    def save(self) -> None:
        """Save current config to file."""
        self._save(self.config)

    # Ephemeris

    def get_ephemeris_path(self) -> Optional[str]:
        """Ephemeris file directory; the SE_EPHE_PATH environment variable wins."""
        return os.environ.get(self.EPHE_PATH_ENV) or self.config.get("ephemeris_path")

    def set_ephemeris_path(self, path: Optional[str]) -> None:
        """
        Set the Swiss Ephemeris file directory.

        Args:
            path: Directory containing .se1 files, or None for Moshier
        """
        if path is not None and not Path(path).is_dir():
            raise ValueError(f"Ephemeris path is not a directory: {path}")

        self.config["ephemeris_path"] = path
        self.save()

    # Search tuning

    def get_search_steps(self) -> int:
        """Grid resolution for exact-moment and station searches."""
        return int(self.config.get("search_steps", 20))

    def set_search_steps(self, steps: int) -> None:
        if not 1 <= steps <= 1000:
            raise ValueError(f"Invalid search_steps: {steps}. Must be between 1 and 1000")

        self.config["search_steps"] = steps
        self.save()

    def get_day_range(self, name: str) -> float:
        """
        Get a day-range setting.

        Args:
            name: One of "active_window_days", "current_day_range", "sample_day_range"
        """
        if name not in self.DAY_RANGE_KEYS:
            raise ValueError(f"Unknown day range setting: {name}")
        return float(self.config.get(name, self.DEFAULT_CONFIG[name]))

    def set_day_range(self, name: str, days: float) -> None:
        """Set a day-range setting (must be positive)."""
        if name not in self.DAY_RANGE_KEYS:
            raise ValueError(f"Unknown day range setting: {name}")
        if days <= 0:
            raise ValueError(f"Invalid {name}: {days}. Must be positive")

        self.config[name] = days
        self.save()

    # Logging

    def get_log_level(self) -> int:
        """Configured log level as a logging module constant."""
        level = str(self.config.get("log_level", "INFO")).upper()
        if level not in self.VALID_LOG_LEVELS:
            return logging.INFO
        return getattr(logging, level)

    def set_log_level(self, level: str) -> None:
        level = level.upper()
        if level not in self.VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {level}. Valid: {self.VALID_LOG_LEVELS}")

        self.config["log_level"] = level
        self.save()

    # Status

    def get_config_status(self) -> Dict[str, Any]:
        """Get configuration status for display."""
        ephe_path = self.get_ephemeris_path()

        return {
            "ephemeris_mode": "sweph" if ephe_path else "moshier",
            "ephemeris_path": ephe_path,
            "search_steps": self.get_search_steps(),
            "active_window_days": self.get_day_range("active_window_days"),
            "current_day_range": self.get_day_range("current_day_range"),
            "sample_day_range": self.get_day_range("sample_day_range"),
            "log_level": logging.getLevelName(self.get_log_level()),
            "config_path": str(self.config_path)
        }
