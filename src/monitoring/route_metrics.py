# src/monitoring/route_metrics.py

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest


class RouteMetrics:
    """Prometheus collectors for route loading and the route cache"""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._initialize_prometheus_metrics()

    def _initialize_prometheus_metrics(self) -> None:
        """Initialize Prometheus metrics collectors"""
        self.routes_loaded = Counter(
            'route_registry_routes_loaded_total',
            'Total number of routes loaded into the cache',
            ['source'],
            registry=self.registry
        )
        self.load_errors = Counter(
            'route_registry_load_errors_total',
            'Total number of route loading errors',
            ['type'],
            registry=self.registry
        )
        self.cache_requests = Counter(
            'route_registry_cache_requests_total',
            'Route cache lookups',
            ['result'],
            registry=self.registry
        )
        self.cache_entries = Gauge(
            'route_registry_cache_entries',
            'Current number of entries in the route cache',
            registry=self.registry
        )

    def record_loaded(self, source: str, count: int = 1) -> None:
        self.routes_loaded.labels(source=source).inc(count)

    def record_error(self, error_type: str) -> None:
        self.load_errors.labels(type=error_type).inc()

    def record_lookup(self, hit: bool) -> None:
        self.cache_requests.labels(result='hit' if hit else 'miss').inc()

    def set_cache_size(self, size: int) -> None:
        self.cache_entries.set(size)

    def sample(self, name: str, **labels) -> float:
        """Current value of a sample, 0.0 when it has not been recorded"""
        value = self.registry.get_sample_value(name, labels or None)
        return value if value is not None else 0.0

    def export(self) -> bytes:
        return generate_latest(self.registry)
