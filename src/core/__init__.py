# src/core/__init__.py

from typing import List, Optional
import logging

from src.config.config_manager import ConfigManager
from src.monitoring.route_metrics import RouteMetrics
from src.security.kms import KmsService
from .configured_route import ConfiguredRoute, route_key
from .route_cache import FunctionalCacheOps, MemoryStash, ObjectCache
from .route_loader import RoutesLoader
from .route_mapper import RouteMapper
from .serializer import RouteSerializer

__all__ = [
    'RoutesManager',
    'ConfiguredRoute',
    'FunctionalCacheOps',
    'MemoryStash',
    'ObjectCache',
    'RouteMapper',
    'RoutesLoader',
    'RouteSerializer',
    'route_key'
]


class RoutesManager:
    """Wires the key service, serializer, route cache and loader together"""

    def __init__(self,
                 config_manager: ConfigManager,
                 metrics: Optional[RouteMetrics] = None) -> None:
        """
        Build route components from configuration.

        NOTE: Routes are not loaded yet. Call the create() factory method
        or await load() to populate the cache.

        Args:
            config_manager: Loaded configuration manager
            metrics: Optional metrics collector
        """
        self.config_manager = config_manager
        self.metrics = metrics or RouteMetrics()
        self.logger = logging.getLogger(__name__)

        security_config = config_manager.get_security_config()
        self.kms = KmsService(
            key_store_path=security_config.key_store_path,
            master_key=security_config.master_key
        )
        self.serializer = RouteSerializer(self.kms)
        self.mapper = RouteMapper()
        self.cache_ops = self._build_cache()
        self.loader = self._build_loader()

    @classmethod
    async def create(cls,
                     config_manager: ConfigManager,
                     metrics: Optional[RouteMetrics] = None) -> 'RoutesManager':
        """
        Factory method to create a RoutesManager with its routes loaded.

        Args:
            config_manager: Loaded configuration manager
            metrics: Optional metrics collector

        Returns:
            RoutesManager with a populated cache
        """
        instance = cls(config_manager, metrics)
        await instance.load()
        return instance

    def _build_cache(self) -> FunctionalCacheOps[ConfiguredRoute]:
        cache_config = self.config_manager.get_cache_config()
        stash = MemoryStash(
            max_size=cache_config.max_size,
            expire_after=cache_config.expire_after
        )
        object_cache = ObjectCache(stash, self.serializer, ConfiguredRoute.from_dict)
        return FunctionalCacheOps(object_cache, self.metrics)

    def _build_loader(self) -> RoutesLoader:
        routes_config = self.config_manager.get_routes_config()
        return RoutesLoader(
            file_routes=routes_config.file,
            string_routes=routes_config.string,
            metrics=self.metrics
        )

    async def load(self) -> List[ConfiguredRoute]:
        """Load routes into the cache"""
        routes = await self.loader.route_information_loaded(self.mapper, self.cache_ops)
        self.logger.info(f"Loaded {len(routes)} routes")
        return routes

    async def reload(self) -> List[ConfiguredRoute]:
        """Drop cached routes and load them again from current configuration"""
        await self.cache_ops.evict_all()
        self.loader = self._build_loader()
        return await self.load()

    async def get_route(self, channel: str, transaction: str) -> Optional[ConfiguredRoute]:
        return await self.cache_ops.get_from_cache(f"{channel}-{transaction}")

    async def list_routes(self) -> List[ConfiguredRoute]:
        routes = []
        for key in sorted(self.cache_ops.keys()):
            route = await self.cache_ops.get_from_cache(key)
            if route is not None:
                routes.append(route)
        return routes
