# src/config/__init__.py

from .config_manager import (
    CacheConfig,
    ConfigManager,
    ConfigurationError,
    LoggingConfig,
    RoutesSourceConfig,
    SecurityConfig,
)

__all__ = [
    'CacheConfig',
    'ConfigManager',
    'ConfigurationError',
    'LoggingConfig',
    'RoutesSourceConfig',
    'SecurityConfig',
]
