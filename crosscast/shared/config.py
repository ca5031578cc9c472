"""
Centralized configuration management.

Sources, later overriding earlier:
1) `env.example` (committed, safe placeholders)
2) `env.local` (optional, MUST NOT be committed)
3) System environment variables (highest priority)
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger


class EnvironConfig:
    """
    Singleton configuration class that loads environment variables from env files
    and system environment, providing dictionary-like access with default values.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(EnvironConfig, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config = {}
            self._load_config()
            EnvironConfig._initialized = True

    def _load_config(self):
        """
        Load configuration from env files and system environment.

        Priority order (later overrides earlier):
        1. env.example (committed placeholders)
        2. env.local (developer-local, not committed)
        3. System environment variables (highest priority)
        """
        root = Path(__file__).parent.parent.parent

        example_path = root / "env.example"
        if example_path.exists():
            self._config.update(dotenv_values(example_path))
            logger.info("Loaded environment variables from {}", example_path)

        local_path = root / "env.local"
        if local_path.exists():
            self._config.update(dotenv_values(local_path))
            logger.info("Loaded and overrode environment variables from {}", local_path)

        self._config.update(os.environ)

    def __getitem__(self, key):
        if key not in self._config:
            raise KeyError(f"Configuration key '{key}' not found")
        return self._config[key]

    def get(self, key, default=None):
        """
        Get configuration value by key with optional default.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            str: Configuration value or default
        """
        return self._config.get(key, default)

    def reload(self):
        """
        Reload configuration from files and environment.
        Useful for testing or when configuration files change.
        """
        self._config.clear()
        self._load_config()
        logger.info("Configuration reloaded")

    def __contains__(self, key):
        return key in self._config

    def __iter__(self):
        return iter(self._config)

    def keys(self):
        return self._config.keys()

    def items(self):
        return self._config.items()

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Read a boolean flag written as true/false, yes/no, on/off or 1/0."""
        value = self.get(key)
        if value is None or not str(value).strip():
            return default
        return str(value).strip().lower() in {"true", "yes", "on", "1"}

    def get_float(self, key: str, default: float) -> float:
        """Read a positive float, falling back to ``default`` on bad input."""
        value = self.get(key)
        if value is None or not str(value).strip():
            return default
        try:
            parsed = float(value)
        except (ValueError, TypeError):
            logger.warning("Invalid {} value '{}', defaulting to {}", key, value, default)
            return default
        if parsed <= 0:
            logger.warning("{} value {} must be positive, defaulting to {}", key, parsed, default)
            return default
        return parsed

    def get_int(self, key: str, default: int) -> int:
        """Read a positive int, falling back to ``default`` on bad input."""
        value = self.get(key)
        if value is None or not str(value).strip():
            return default
        try:
            parsed = int(value)
        except (ValueError, TypeError):
            logger.warning("Invalid {} value '{}', defaulting to {}", key, value, default)
            return default
        if parsed <= 0:
            logger.warning("{} value {} must be positive, defaulting to {}", key, parsed, default)
            return default
        return parsed

    def get_redis_url(self) -> str:
        """
        Get Redis connection URL.

        Returns:
            str: REDIS_URL_DEFAULT, then REDIS_URL, then the local default
        """
        for key in ("REDIS_URL_DEFAULT", "REDIS_URL"):
            url = self.get(key)
            if url:
                return url
        return "redis://localhost:6379"


# Global configuration instance
config = EnvironConfig()
