"""
Configuration management for memory-mcp.
Handles config file discovery, loading and the default storage location.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

import yaml


def get_xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


APP_NAME = "memory-mcp"
CONFIG_DIR = get_xdg_config_home() / APP_NAME
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_MEMORY_FILE = "memories.md"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when an explicitly requested config file cannot be used."""


@dataclass
class Config:
    """Configuration for memory-mcp.

    The defaults reproduce the plain behaviour of the server: a
    ``memories.md`` file in the current working directory.
    """

    memory_file: str = DEFAULT_MEMORY_FILE
    storage_root: Path = field(default_factory=lambda: Path("."))
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        self.storage_root = Path(self.storage_root)
        self.log_level = str(self.log_level).upper()

    @property
    def memory_path(self) -> Path:
        """Full path of the memory log. An absolute memory_file wins."""
        return self.storage_root / self.memory_file

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.memory_file or not str(self.memory_file).strip():
            errors.append("memory_file must not be empty.")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"Unknown log_level '{self.log_level}'. Use one of: {', '.join(LOG_LEVELS)}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "memory_file": self.memory_file,
            "storage_root": str(self.storage_root),
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create from dictionary, ignoring unknown keys."""
        config = cls()

        if data.get("memory_file"):
            config.memory_file = str(data["memory_file"])
        if data.get("storage_root"):
            config.storage_root = Path(os.path.expanduser(str(data["storage_root"])))
        if data.get("log_level"):
            config.log_level = str(data["log_level"]).upper()

        return config

    def save(self, path: Optional[Path] = None):
        """Save configuration to file."""
        path = Path(path) if path else CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def load(cls, path: Optional[Path] = None, strict: bool = False) -> "Config":
        """Load configuration from file, or create default.

        Gracefully handles a missing or malformed default config file by
        returning defaults. With ``strict=True`` (an explicitly named file)
        problems raise ConfigError instead.
        """
        path = Path(path) if path else CONFIG_FILE

        if not path.exists():
            if strict:
                raise ConfigError(f"Config file not found: {path}")
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top level must be a mapping")
            return cls.from_dict(data)
        except (OSError, ValueError, yaml.YAMLError) as e:
            if strict:
                raise ConfigError(f"Error loading config from {path}: {e}") from e
            warnings.warn(f"Error loading config from {path}: {e}. Using defaults.")
            return cls()


# Global config instance (lazy loaded and cached)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance (lazy loaded and cached)."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def reload_config(path: Optional[Path] = None) -> Config:
    """Reload config from file, updating the global instance."""
    global _config
    _config = Config.load(path, strict=path is not None)
    return _config


def set_config(config: Optional[Config]):
    """Set the global config instance (primarily for testing)."""
    global _config
    _config = config
