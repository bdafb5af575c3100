"""Tests for settings resolution (defaults, YAML file, environment)."""

import logging

import pytest

from recipe_finder.config import Settings, configure_logging, load_settings
from recipe_finder.data_layer.exceptions import ConfigurationError


@pytest.fixture
def yaml_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "cache_duration_hours: 12\n"
        "data_dir: /var/lib/recipes\n"
        "allowed_origins:\n"
        "  - https://example.com\n"
    )
    return path


class TestDefaults:
    def test_defaults(self):
        settings = load_settings(environ={})

        assert settings.api_key is None
        assert settings.cache_duration_hours == 24
        assert settings.cache_ttl_seconds == 86400
        assert settings.api_timeout_seconds == 30
        assert settings.data_dir == "data"
        assert settings.port == 8080
        assert settings.allowed_origins == ["http://localhost:3000", "http://localhost:3001"]

    def test_require_api_key(self):
        with pytest.raises(ConfigurationError):
            Settings().require_api_key()
        assert Settings(api_key=" abc ").require_api_key() == "abc"


class TestEnvironment:
    """Tests for environment variable overrides."""

    def test_env_overrides(self):
        settings = load_settings(environ={
            "SPOONACULAR_API_KEY": "secret",
            "CACHE_DURATION_HOURS": "1",
            "API_TIMEOUT_SECONDS": "5",
            "DATA_DIR": "/tmp/recipes",
            "ALLOWED_ORIGINS": "https://a.com, https://b.com",
            "PORT": "9000",
            "LOG_LEVEL": "DEBUG",
        })

        assert settings.api_key == "secret"
        assert settings.cache_ttl_seconds == 3600
        assert settings.api_timeout_seconds == 5
        assert settings.data_dir == "/tmp/recipes"
        assert settings.allowed_origins == ["https://a.com", "https://b.com"]
        assert settings.port == 9000
        assert settings.log_level == "DEBUG"

    def test_invalid_integer_keeps_default(self):
        assert load_settings(environ={"PORT": "eighty"}).port == 8080

    def test_empty_value_ignored(self):
        assert load_settings(environ={"DATA_DIR": ""}).data_dir == "data"

    def test_negative_cache_duration_rejected(self):
        with pytest.raises(ConfigurationError):
            load_settings(environ={"CACHE_DURATION_HOURS": "-1"})

    def test_zero_timeout_rejected(self):
        with pytest.raises(ConfigurationError):
            load_settings(environ={"API_TIMEOUT_SECONDS": "0"})


class TestYamlFile:
    """Tests for the YAML settings layer."""

    def test_file_values(self, yaml_file):
        settings = load_settings(str(yaml_file), environ={})
        assert settings.cache_duration_hours == 12
        assert settings.data_dir == "/var/lib/recipes"
        assert settings.allowed_origins == ["https://example.com"]

    def test_env_beats_file(self, yaml_file):
        settings = load_settings(str(yaml_file), environ={"CACHE_DURATION_HOURS": "2"})
        assert settings.cache_duration_hours == 2

    def test_path_from_environment(self, yaml_file):
        settings = load_settings(environ={"RECIPE_FINDER_CONFIG": str(yaml_file)})
        assert settings.data_dir == "/var/lib/recipes"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_settings(str(tmp_path / "missing.yaml"), environ={})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_settings(str(path), environ={})

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_settings(str(path), environ={})

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(str(path), environ={}).port == 8080


class TestConfigureLogging:
    def test_does_not_raise_on_unknown_level(self):
        configure_logging("NOT_A_LEVEL")
        assert logging.getLogger().handlers
