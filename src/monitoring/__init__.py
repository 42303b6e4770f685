# src/monitoring/__init__.py

from .route_metrics import RouteMetrics

__all__ = ['RouteMetrics']
