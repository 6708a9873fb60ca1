"""
Configuration management for Stashkeeper.

Provides centralized configuration loading from environment variables
with sensible defaults for all settings.
"""

import os
from pathlib import Path
from typing import Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = 'dev-secret-key-change-in-production'


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('true', '1', 'yes')


class Config:
    """
    Centralized configuration management for Stashkeeper.

    Loads configuration from environment variables with fallback defaults.
    Supports .env files via python-dotenv.

    Example:
        config = Config()
        print(config.database_path)  # stashkeeper.db
        print(config.port)           # 5000
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file. If None, auto-discovers .env
                     in project root or skips if not found.
        """
        if env_file:
            load_dotenv(env_file)
            logger.info(f"Loaded configuration from {env_file}")
        else:
            # Auto-discover .env in project root
            project_root = Path(__file__).parent.parent.parent
            env_path = project_root / '.env'
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded configuration from {env_path}")
            else:
                logger.debug("No .env file found, using environment variables and defaults")

        # === Server Settings ===
        self.host = os.getenv('HOST', '0.0.0.0')
        self.port = int(os.getenv('PORT', '5000'))
        self.debug = _env_flag('DEBUG', 'False')
        self.secret_key = os.getenv('SECRET_KEY', DEFAULT_SECRET_KEY)

        # === Logging ===
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_file = os.getenv('LOG_FILE', None)
        self.log_colors = _env_flag('LOG_COLORS', 'True')

        # === Database ===
        self.database_path = os.getenv('DATABASE_PATH', 'stashkeeper.db')

        # === Identity ===
        # Bearer tokens older than this are rejected (seconds)
        self.token_max_age = int(os.getenv('TOKEN_MAX_AGE', str(7 * 24 * 3600)))

        # === Inventory ===
        self.save_cooldown_seconds = float(os.getenv('SAVE_COOLDOWN_SECONDS', '5'))
        self.template_cache_ttl = float(os.getenv('TEMPLATE_CACHE_TTL', '60'))

    def validate(self) -> bool:
        """
        Validate configuration and log warnings for questionable values.

        Returns:
            True if config is valid, False if critical values are wrong
        """
        valid = True

        if self.save_cooldown_seconds < 0:
            logger.error(f"Invalid SAVE_COOLDOWN_SECONDS: {self.save_cooldown_seconds}. Must be >= 0")
            valid = False

        if self.template_cache_ttl <= 0:
            logger.error(f"Invalid TEMPLATE_CACHE_TTL: {self.template_cache_ttl}. Must be > 0")
            valid = False

        if self.token_max_age <= 0:
            logger.error(f"Invalid TOKEN_MAX_AGE: {self.token_max_age}. Must be > 0")
            valid = False

        # Warn about dev secret key in non-debug mode
        if not self.debug and self.secret_key == DEFAULT_SECRET_KEY:
            logger.warning("Using default SECRET_KEY in production mode! Set SECRET_KEY environment variable.")

        return valid

    def __repr__(self) -> str:
        """Safe representation hiding sensitive values."""
        return (
            f"Config("
            f"database_path={self.database_path}, "
            f"host={self.host}, "
            f"port={self.port}, "
            f"debug={self.debug})"
        )


# Global config instance (lazy-loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global config instance (singleton pattern).

    Returns:
        Global Config instance

    Example:
        from stashkeeper.core.config import get_config
        config = get_config()
        print(config.database_path)
    """
    global _config
    if _config is None:
        _config = Config()
        _config.validate()
    return _config


__all__ = ['Config', 'get_config']
