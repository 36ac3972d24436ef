"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_float, env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .etl import DEFAULT_BATCH_SIZE, EtlConfig, get_etl_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "ConfigurationError",
    "DatabaseConfig",
    "EtlConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "get_database_config",
    "get_etl_config",
    "get_storage_config",
    "require_env_vars",
]
