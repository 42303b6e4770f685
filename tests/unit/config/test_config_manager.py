# tests/unit/config/test_config_manager.py

from unittest.mock import Mock

import pytest
import yaml

from src.config.config_manager import ConfigFileHandler, ConfigManager, ConfigurationError


def _manager(config_dir, environment="dev"):
    return ConfigManager(
        config_path=str(config_dir),
        environment=environment,
        enable_hot_reload=False
    )


class TestConfigManager:
    def test_load_config(self, config_dir):
        """Base and environment layers are merged"""
        manager = _manager(config_dir)

        assert manager.get_config("cache")["max_size"] == 50
        assert manager.get_config("config_routes")["file"] == "routes.json"

    def test_env_variable_override_with_double_underscore(self, config_dir, monkeypatch):
        monkeypatch.setenv("APP_CONFIG_ROUTES__FILE", "other.json")

        manager = _manager(config_dir)

        assert manager.get_config("config_routes")["file"] == "other.json"

    def test_env_override_preserves_underscored_field_names(self, config_dir, monkeypatch):
        monkeypatch.setenv("APP_CACHE_MAX_SIZE", "10")

        manager = _manager(config_dir)

        cache_config = manager.get_config("cache")
        assert cache_config["max_size"] == 10
        assert "max" not in cache_config

    def test_env_override_for_underscored_component(self, config_dir, monkeypatch):
        monkeypatch.setenv("APP_CONFIG_ROUTES_STRING", "[]")

        manager = _manager(config_dir)

        assert manager.get_config("config_routes")["string"] == "[]"

    def test_missing_routes_section(self, config_dir):
        with open(config_dir / "broken.yaml", "w") as f:
            yaml.dump({"config_routes": None}, f)

        with pytest.raises(ConfigurationError):
            _manager(config_dir, "broken")

    def test_missing_routes_field(self, tmp_path):
        with open(tmp_path / "base.yaml", "w") as f:
            yaml.dump({"config_routes": {"string": "[]"}}, f)

        with pytest.raises(ConfigurationError, match="file"):
            _manager(tmp_path)

    def test_invalid_cache_size(self, config_dir):
        with open(config_dir / "bad.yaml", "w") as f:
            yaml.dump({"cache": {"max_size": "many"}}, f)

        with pytest.raises(ConfigurationError):
            _manager(config_dir, "bad")

    def test_invalid_yaml(self, config_dir):
        (config_dir / "bad.yaml").write_text("cache: [unclosed")

        with pytest.raises(ConfigurationError):
            _manager(config_dir, "bad")

    def test_master_key_env_reference(self, config_dir, monkeypatch):
        monkeypatch.setenv("ROUTES_MASTER_KEY", "resolved-key")
        with open(config_dir / "dev.yaml", "w") as f:
            yaml.dump({"security": {"master_key": "env:ROUTES_MASTER_KEY"}}, f)

        manager = _manager(config_dir)

        assert manager.get_security_config().master_key == "resolved-key"

    def test_unset_master_key_reference_fails_in_prod(self, config_dir, monkeypatch):
        monkeypatch.delenv("ROUTES_MASTER_KEY", raising=False)
        with open(config_dir / "prod.yaml", "w") as f:
            yaml.dump({"security": {"master_key": "env:ROUTES_MASTER_KEY"}}, f)

        with pytest.raises(ConfigurationError):
            _manager(config_dir, "prod")

    def test_get_routes_config_resolves_relative_file(self, config_dir):
        routes_config = _manager(config_dir).get_routes_config()

        assert routes_config.file == str(config_dir / "routes.json")
        assert routes_config.string.startswith("[")

    def test_get_cache_config(self, config_dir):
        cache_config = _manager(config_dir).get_cache_config()

        assert cache_config.max_size == 50
        assert cache_config.expire_after is None

    def test_get_security_config_resolves_relative_key_store(self, config_dir):
        with open(config_dir / "dev.yaml", "w") as f:
            yaml.dump({"security": {"key_store_path": ".keys"}}, f)

        security_config = _manager(config_dir).get_security_config()

        assert security_config.key_store_path == str(config_dir / ".keys")

    def test_get_logging_config(self, config_dir):
        logging_config = _manager(config_dir).get_logging_config()

        assert logging_config.level == "INFO"
        assert "%(message)s" in logging_config.format


class TestConfigManagerCacheBehavior:
    def test_apply_env_variables_caches_override_paths(self, config_dir, monkeypatch):
        monkeypatch.setenv("APP_CACHE_MAX_SIZE", "25")
        manager = _manager(config_dir)

        original_parse = manager._parse_env_override_path
        manager._parse_env_override_path = Mock(wraps=original_parse)

        manager._apply_env_variables()
        manager._apply_env_variables()

        assert manager._parse_env_override_path.call_count == 0

    def test_get_config_avoids_reload_when_component_cached(self, config_dir, monkeypatch):
        manager = _manager(config_dir)

        reload_spy = Mock(wraps=manager.reload_config)
        monkeypatch.setattr(manager, "reload_config", reload_spy)

        assert manager.get_config("cache")["max_size"] == 50
        reload_spy.assert_not_called()


class TestConfigFileHandler:
    def test_modified_yaml_reloads_configuration(self, config_dir):
        manager = _manager(config_dir)
        with open(config_dir / "dev.yaml", "w") as f:
            yaml.dump({"cache": {"max_size": 7}}, f)

        ConfigFileHandler(manager).on_modified(Mock(src_path=str(config_dir / "dev.yaml")))

        assert manager.get_cache_config().max_size == 7

    def test_invalid_change_keeps_previous_configuration(self, config_dir, caplog):
        manager = _manager(config_dir)
        (config_dir / "dev.yaml").write_text("cache: [unclosed")

        ConfigFileHandler(manager).on_modified(Mock(src_path=str(config_dir / "dev.yaml")))

        assert manager.get_cache_config().max_size == 50
        assert "Ignoring change to" in caplog.text

    def test_other_files_are_ignored(self, config_dir):
        manager = _manager(config_dir)
        reload_spy = Mock()
        manager.reload_config = reload_spy

        ConfigFileHandler(manager).on_modified(Mock(src_path=str(config_dir / "routes.json")))

        reload_spy.assert_not_called()
