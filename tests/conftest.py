# tests/conftest.py

import json

import pytest
import yaml
from cryptography.fernet import Fernet

from src.core.configured_route import ConfiguredRoute
from src.core.route_cache import FunctionalCacheOps, MemoryStash, ObjectCache
from src.core.route_loader import RoutesLoader
from src.core.route_mapper import RouteMapper
from src.core.serializer import RouteSerializer
from src.monitoring.route_metrics import RouteMetrics
from src.security.kms import KmsService

INLINE_ROUTES = '[{"channel":"D2B","transaction":"9540"}]'

FILE_ROUTES = [
    {"channel": "D2B", "transaction": "9541", "target": "https://d2b.test/transfers"},
    {"channel": "APP", "transaction": "1001", "timeout": 2.5},
]


@pytest.fixture
def kms():
    """Key service with a fixed in-memory key"""
    return KmsService(master_key=Fernet.generate_key())


@pytest.fixture
def serializer(kms):
    return RouteSerializer(kms)


@pytest.fixture
def mapper():
    return RouteMapper()


@pytest.fixture
def metrics():
    return RouteMetrics()


@pytest.fixture
def cache_ops(serializer, metrics):
    """Route cache with the default size and no expiry"""
    object_cache = ObjectCache(MemoryStash(), serializer, ConfiguredRoute.from_dict)
    return FunctionalCacheOps(object_cache, metrics)


@pytest.fixture
def routes_file(tmp_path):
    path = tmp_path / "routes.json"
    path.write_text(json.dumps(FILE_ROUTES))
    return path


@pytest.fixture
def loader(tmp_path, metrics):
    """Loader pointing at a file that does not exist yet"""
    return RoutesLoader(
        file_routes=str(tmp_path / "file"),
        string_routes=INLINE_ROUTES,
        metrics=metrics
    )


@pytest.fixture
def config_dir(tmp_path, routes_file):
    """Configuration directory with base and dev layers"""
    base_config = {
        "config_routes": {
            "file": routes_file.name,
            "string": INLINE_ROUTES,
        },
        "cache": {
            "max_size": 999,
        },
        "security": {
            "key_store_path": str(tmp_path / "keys"),
        },
        "logging": {
            "level": "INFO",
        },
    }

    with open(tmp_path / "base.yaml", "w") as f:
        yaml.dump(base_config, f)

    with open(tmp_path / "dev.yaml", "w") as f:
        yaml.dump({"cache": {"max_size": 50}}, f)

    return tmp_path
