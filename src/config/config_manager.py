# src/config/config_manager.py

import yaml
import os
from typing import Dict, Any, List, Optional, Tuple
from pathlib import Path
from dataclasses import dataclass
import logging
import threading
import time
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

ENV_PREFIX = 'APP_'


@dataclass
class RoutesSourceConfig:
    file: str
    string: str


@dataclass
class CacheConfig:
    max_size: int = 999
    expire_after: Optional[float] = None


@dataclass
class SecurityConfig:
    key_store_path: Optional[str] = None
    master_key: Optional[str] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ConfigurationError(Exception):
    """Custom exception for configuration errors"""
    pass


class ConfigFileHandler(FileSystemEventHandler):
    """Reloads configuration when a YAML file changes"""

    def __init__(self, config_manager: 'ConfigManager') -> None:
        self.config_manager = config_manager

    def on_modified(self, event):
        if event.src_path.endswith('.yaml') or event.src_path.endswith('.yml'):
            try:
                self.config_manager.reload_config()
            except ConfigurationError as e:
                self.config_manager.logger.warning(
                    f"Ignoring change to {event.src_path}: {e}"
                )


class ConfigManager:
    def __init__(self,
                 config_path: str,
                 environment: str,
                 enable_hot_reload: bool = True) -> None:
        """
        Initialize configuration manager

        Args:
            config_path: Directory holding ``base.yaml`` and ``<environment>.yaml``
            environment: Deployment environment (dev/staging/prod)
            enable_hot_reload: Enable configuration hot reloading
        """
        self.config_path = Path(config_path)
        self.environment = environment
        self.enable_hot_reload = enable_hot_reload

        self._config_cache: Dict[str, Any] = {}
        self._config_lock = threading.RLock()
        self._env_override_cache: Dict[str, Tuple[str, ...]] = {}
        self._last_reload = time.time()
        self._observer: Optional[Observer] = None

        self.logger = logging.getLogger('ConfigManager')

        self.reload_config()

        if enable_hot_reload:
            self._start_config_watcher()

    def _start_config_watcher(self) -> None:
        """Start watching configuration files for changes"""
        self._observer = Observer()
        self._observer.schedule(ConfigFileHandler(self), str(self.config_path), recursive=False)
        self._observer.start()
        self.logger.info("Started configuration file watcher")

    def stop(self) -> None:
        """Stop the configuration file watcher"""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def get_config(self, component: str) -> Dict[str, Any]:
        """
        Get configuration for a specific component

        Args:
            component: Component name (e.g., 'config_routes', 'cache', 'security')

        Returns:
            Dictionary containing component configuration
        """
        with self._config_lock:
            if component not in self._config_cache:
                self.reload_config()
            return self._config_cache.get(component, {})

    def reload_config(self) -> None:
        """Reload configuration from files and environment"""
        with self._config_lock:
            try:
                base_config = self._load_yaml_config('base')
                env_config = self._load_yaml_config(self.environment)

                config = self._merge_configs(base_config, env_config)
                self._apply_env_variables(config)
                self._validate_config(config)

                self._config_cache = config
                self._last_reload = time.time()
                self.logger.info("Successfully reloaded configuration")

            except ConfigurationError as e:
                self.logger.error(f"Failed to reload configuration: {str(e)}")
                raise
            except Exception as e:
                self.logger.error(f"Failed to reload configuration: {str(e)}")
                raise ConfigurationError(f"Configuration reload failed: {str(e)}") from e

    def _load_yaml_config(self, config_name: str) -> Dict[str, Any]:
        """Load YAML configuration file"""
        config_file = self.config_path / f"{config_name}.yaml"
        try:
            if config_file.exists():
                with open(config_file, 'r') as f:
                    return yaml.safe_load(f) or {}
            return {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load {config_name} configuration: {str(e)}")
            raise ConfigurationError(f"Failed to load {config_name} configuration") from e

    def _merge_configs(self, base: Dict[str, Any],
                       override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge configuration dictionaries with override"""
        merged = base.copy()
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _apply_env_variables(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Apply environment variable overrides"""
        target = self._config_cache if config is None else config
        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            path = self._env_override_cache.get(key)
            if path is None:
                path = self._parse_env_override_path(key[len(ENV_PREFIX):], target)
                self._env_override_cache[key] = path
            if path:
                self._set_nested_value(target, list(path), value)

    def _parse_env_override_path(self, name: str,
                                 config: Dict[str, Any]) -> Tuple[str, ...]:
        """
        Translate an override name into a configuration path

        ``CONFIG_ROUTES__FILE`` maps to ``config_routes.file``. Without a
        double underscore the longest known component prefix is used, so
        ``CACHE_MAX_SIZE`` maps to ``cache.max_size``.
        """
        name = name.lower()
        if '__' in name:
            return tuple(part for part in name.split('__') if part)

        for component in sorted(config.keys(), key=len, reverse=True):
            prefix = f"{component}_"
            if name.startswith(prefix) and len(name) > len(prefix):
                return (component, name[len(prefix):])
        return ()

    def _set_nested_value(self, config: Dict[str, Any],
                          path: List[str], value: Any) -> None:
        """Set nested dictionary value using path list"""
        current = config
        for part in path[:-1]:
            current = current.setdefault(part, {})
        current[path[-1]] = value

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate configuration completeness and types"""
        routes = config.get('config_routes')
        if not isinstance(routes, dict):
            raise ConfigurationError("Missing configuration for config_routes")

        for field in ('file', 'string'):
            if field not in routes:
                raise ConfigurationError(f"Missing required config_routes configuration: {field}")
        if routes.get('string') is None:
            routes['string'] = '[]'

        cache = config.setdefault('cache', {})
        try:
            cache['max_size'] = int(cache.get('max_size', 999))
            if cache.get('expire_after') is not None:
                cache['expire_after'] = float(cache['expire_after'])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid cache configuration: {e}") from e
        if cache['max_size'] <= 0:
            raise ConfigurationError("cache.max_size must be positive")

        security = config.setdefault('security', {})
        if security.get('master_key'):
            security['master_key'] = self._resolve_secret_reference(security['master_key'])

        config.setdefault('logging', {})

    def _resolve_secret_reference(self, value: str) -> str:
        """
        Resolve an ``env:VAR_NAME`` reference

        Args:
            value: Literal value or environment reference

        Returns:
            Resolved secret value
        """
        if not isinstance(value, str) or not value.startswith('env:'):
            return value

        env_var = value.split(':', 1)[1]
        result = os.environ.get(env_var, '')
        if not result:
            if self.environment == 'prod':
                raise ConfigurationError(
                    f"Production environment requires environment variable '{env_var}'"
                )
            self.logger.warning(f"Environment variable '{env_var}' not set")
        return result

    def get_routes_config(self) -> RoutesSourceConfig:
        """Get routes source configuration as dataclass"""
        routes_config = self.get_config('config_routes')
        file_routes = routes_config['file']
        if file_routes and not Path(file_routes).is_absolute():
            file_routes = str(self.config_path / file_routes)
        return RoutesSourceConfig(
            file=file_routes or '',
            string=routes_config['string']
        )

    def get_cache_config(self) -> CacheConfig:
        """Get cache configuration as dataclass"""
        cache_config = self.get_config('cache')
        return CacheConfig(
            max_size=cache_config.get('max_size', 999),
            expire_after=cache_config.get('expire_after')
        )

    def get_security_config(self) -> SecurityConfig:
        """Get security configuration as dataclass"""
        security_config = self.get_config('security')
        key_store_path = security_config.get('key_store_path')
        if key_store_path and not Path(key_store_path).is_absolute():
            key_store_path = str(self.config_path / key_store_path)
        return SecurityConfig(
            key_store_path=key_store_path or None,
            master_key=security_config.get('master_key') or None
        )

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration as dataclass"""
        logging_config = self.get_config('logging')
        defaults = LoggingConfig()
        return LoggingConfig(
            level=str(logging_config.get('level', defaults.level)).upper(),
            format=logging_config.get('format', defaults.format)
        )
