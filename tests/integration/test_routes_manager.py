# tests/integration/test_routes_manager.py

import json

import pytest

from src.config.config_manager import ConfigManager
from src.core import RoutesManager


@pytest.fixture
def config_manager(config_dir):
    return ConfigManager(
        config_path=str(config_dir),
        environment="dev",
        enable_hot_reload=False
    )


@pytest.mark.asyncio
async def test_create_loads_routes_from_file(config_manager):
    manager = await RoutesManager.create(config_manager)

    route = await manager.get_route("D2B", "9541")
    assert route.target == "https://d2b.test/transfers"
    assert [f"{r.channel}-{r.transaction}" for r in await manager.list_routes()] == [
        "APP-1001",
        "D2B-9541",
    ]
    assert manager.metrics.sample("route_registry_routes_loaded_total", source="file") == 2


@pytest.mark.asyncio
async def test_missing_file_uses_inline_routes(config_dir, config_manager, routes_file):
    routes_file.unlink()

    manager = await RoutesManager.create(config_manager)

    assert await manager.get_route("D2B", "9540") is not None
    assert await manager.get_route("D2B", "9541") is None


@pytest.mark.asyncio
async def test_cache_size_comes_from_configuration(config_manager, routes_file):
    routes = [{"channel": "C", "transaction": str(i)} for i in range(60)]
    routes_file.write_text(json.dumps(routes))

    manager = await RoutesManager.create(config_manager)

    assert len(manager.cache_ops.keys()) == 50
    assert await manager.get_route("C", "0") is None
    assert await manager.get_route("C", "59") is not None


@pytest.mark.asyncio
async def test_reload_replaces_cached_routes(config_manager, routes_file):
    manager = await RoutesManager.create(config_manager)
    routes_file.write_text(json.dumps([{"channel": "NEW", "transaction": "1"}]))

    routes = await manager.reload()

    assert [r.channel for r in routes] == ["NEW"]
    assert await manager.get_route("D2B", "9541") is None


@pytest.mark.asyncio
async def test_key_store_is_created_from_configuration(config_manager, config_dir):
    manager = await RoutesManager.create(config_manager)
    token = manager.kms.encrypt("value")

    assert (config_dir / "keys" / "current.key").exists()
    assert manager.kms.decrypt(token) == "value"


@pytest.mark.asyncio
async def test_duplicate_routes_keep_the_last_definition(config_manager, routes_file):
    routes_file.write_text(json.dumps([
        {"channel": "D2B", "transaction": "9540", "target": "a"},
        {"channel": "D2B", "transaction": "9540", "target": "b"},
    ]))

    manager = await RoutesManager.create(config_manager)

    route = await manager.get_route("D2B", "9540")
    assert route.target == "b"
    assert manager.cache_ops.keys() == ["D2B-9540"]
