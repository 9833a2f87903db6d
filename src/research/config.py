#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration,
including environment variables, defaults, and validation.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ('memory', 'postgres')


@dataclass
class DatabaseConfig:
    """Database connection configuration."""
    storage_backend: str = 'memory'
    database_url: Optional[str] = None
    connection_timeout: int = 30


@dataclass
class IntegrationConfig:
    """External integration configuration."""
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    newsapi_key: Optional[str] = None


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    # Source fetching
    feed_timeout: int = 30
    feed_user_agent: str = "UPSC-Mentor-Current-Affairs-Agent/1.0"
    source_delay_ms: int = 500

    # Analysis generation
    analysis_concurrency: int = 2
    analysis_delay_ms: int = 2000

    # Run lifecycle
    run_max_retries: int = 3
    timezone: str = "Asia/Kolkata"

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """Master configuration container."""
    database: DatabaseConfig
    integrations: IntegrationConfig
    app: ApplicationConfig

    def has_openai(self) -> bool:
        """Check if OpenAI integration is available."""
        return bool(self.integrations.openai_api_key)

    def uses_postgres(self) -> bool:
        return self.database.storage_backend == 'postgres'


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
        """
        self._config: Optional[Config] = None
        self._env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self) -> None:
        """Load environment variables from .env file."""
        project_root = Path(__file__).resolve().parents[2]
        env_path = project_root / self._env_file_path

        if env_path.exists():
            self._load_env_file(env_path)
        else:
            logger.debug(f"No .env file found at {env_path}")

    def _load_env_file(self, env_path: Path) -> None:
        """Load variables from .env file."""
        try:
            with open(env_path, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except OSError as e:
            logger.error(f"Error loading .env file {env_path}: {e}")
            return

        loaded_count = 0
        for line_num, line in enumerate(lines, 1):
            line = line.strip()

            if not line or line.startswith('#'):
                continue

            if '=' not in line:
                logger.warning(f"Invalid .env format at line {line_num}: {line}")
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            if value.startswith('"') and value.endswith('"'):
                value = value[1:-1]
            elif value.startswith("'") and value.endswith("'"):
                value = value[1:-1]

            # Environment variables take precedence over the file
            if key not in os.environ:
                os.environ[key] = value
                loaded_count += 1
                logger.debug(f"Loaded {key} from .env")

        logger.info(f"Loaded {loaded_count} variables from {env_path}")

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        database_config = DatabaseConfig(
            storage_backend=os.getenv('STORAGE_BACKEND', 'memory').lower(),
            database_url=os.getenv('DATABASE_URL'),
            connection_timeout=self._get_int('DB_CONNECTION_TIMEOUT', 30)
        )

        integration_config = IntegrationConfig(
            openai_api_key=os.getenv('OPENAI_API_KEY'),
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o'),
            newsapi_key=os.getenv('NEWSAPI_KEY')
        )

        app_config = ApplicationConfig(
            feed_timeout=self._get_int('FEED_TIMEOUT', 30),
            feed_user_agent=os.getenv('FEED_USER_AGENT', 'UPSC-Mentor-Current-Affairs-Agent/1.0'),
            source_delay_ms=self._get_int('SOURCE_DELAY_MS', 500),
            analysis_concurrency=self._get_int('ANALYSIS_CONCURRENCY', 2),
            analysis_delay_ms=self._get_int('ANALYSIS_DELAY_MS', 2000),
            run_max_retries=self._get_int('RUN_MAX_RETRIES', 3),
            timezone=os.getenv('TIMEZONE', 'Asia/Kolkata'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true'
        )

        config = Config(
            database=database_config,
            integrations=integration_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def _get_int(self, key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or raw == '':
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(key, f"expected an integer, got '{raw}'")

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        errors = []

        if config.database.storage_backend not in STORAGE_BACKENDS:
            errors.append(f"STORAGE_BACKEND must be one of: {', '.join(STORAGE_BACKENDS)}")

        if config.uses_postgres() and not config.database.database_url:
            errors.append("DATABASE_URL is required when STORAGE_BACKEND=postgres")

        if config.app.feed_timeout < 1:
            errors.append("FEED_TIMEOUT must be at least 1 second")

        if config.app.source_delay_ms < 0:
            errors.append("SOURCE_DELAY_MS must not be negative")

        if config.app.analysis_concurrency < 1 or config.app.analysis_concurrency > 10:
            errors.append("ANALYSIS_CONCURRENCY must be between 1 and 10")

        if config.app.analysis_delay_ms < 0:
            errors.append("ANALYSIS_DELAY_MS must not be negative")

        if config.app.run_max_retries < 0:
            errors.append("RUN_MAX_RETRIES must not be negative")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ConfigurationError('environment', '; '.join(errors))

        logger.debug("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')
            handler.setFormatter(formatter)


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
