"""Tests for configuration classes."""

import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from synop_ingest.config.base import BaseConfig
from synop_ingest.config.paths import DEFAULT_CACHE_DIR, get_cache_path
from synop_ingest.config.settings import (
    DEFAULT_INGEST_CONFIG,
    FetchSettings,
    IngestConfig,
    StoreSettings,
)


class SampleConfig(BaseConfig):
    """Test configuration class for testing base functionality."""

    name: str
    value: int = 42
    enabled: bool = True


def test_base_config():
    """Test basic BaseConfig functionality."""
    config = SampleConfig(name="test")
    assert config.name == "test"
    assert config.value == 42
    assert config.enabled is True


def test_base_config_validation():
    """Test that BaseConfig validates input."""
    # Missing required field should raise ValidationError
    with pytest.raises(ValidationError):
        SampleConfig()

    # Invalid type should raise ValidationError
    with pytest.raises(ValidationError):
        SampleConfig(name="test", value="not_an_int")

    # Extra fields should raise ValidationError (extra='forbid')
    with pytest.raises(ValidationError):
        SampleConfig(name="test", extra_field="not_allowed")


def test_base_config_validates_assignment():
    config = SampleConfig(name="test")

    with pytest.raises(ValidationError):
        config.value = "not_an_int"


def test_base_config_to_yaml():
    """Test converting config to YAML string."""
    config = SampleConfig(name="test", value=99)
    yaml_str = config.to_yaml()

    assert "name: test" in yaml_str
    assert "value: 99" in yaml_str
    assert "enabled: true" in yaml_str


def test_base_config_yaml_file_roundtrip():
    """Test saving and loading config from a YAML file."""
    config = SampleConfig(name="test", value=99, enabled=False)

    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.yaml"
        config.to_yaml_file(path)
        loaded = SampleConfig.from_yaml_file(path)

    assert loaded == config


def test_base_config_json_file_roundtrip():
    """Test saving and loading config from a JSON file."""
    config = SampleConfig(name="test", value=7)

    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        config.to_json_file(path)
        loaded = SampleConfig.from_file(path)

    assert loaded == config


def test_base_config_from_yaml_file_missing():
    with pytest.raises(FileNotFoundError):
        SampleConfig.from_yaml_file("/nonexistent/config.yaml")


def test_fetch_settings_defaults():
    settings = FetchSettings()

    assert settings.base_url == "https://donneespubliques.meteofrance.fr/donnees_libres/Txt/Synop/"
    assert settings.station_path == "postesSynop.csv"
    assert settings.timeout_seconds == 10.0
    assert settings.cache_dir == DEFAULT_CACHE_DIR


def test_fetch_settings_base_url_gets_trailing_slash():
    settings = FetchSettings(base_url="http://mirror.example/synop")

    assert settings.base_url == "http://mirror.example/synop/"


def test_fetch_settings_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        FetchSettings(timeout_seconds=0)


def test_store_settings_defaults():
    settings = StoreSettings()

    assert settings.url is None
    assert settings.enabled is False
    assert settings.database == "synop"
    assert settings.measurement == "measurements"
    assert settings.batch_size == 5000


def test_store_settings_enabled_with_url():
    assert StoreSettings(url="http://localhost:8086").enabled is True


@pytest.mark.parametrize("batch_size", [0, -1, 100_001])
def test_store_settings_batch_size_bounds(batch_size):
    with pytest.raises(ValidationError):
        StoreSettings(batch_size=batch_size)


def test_store_settings_rejects_empty_measurement():
    with pytest.raises(ValidationError):
        StoreSettings(measurement="")


def test_ingest_config_from_yaml():
    config = IngestConfig.from_yaml(
        """
fetch:
  cache_dir: /var/cache/synop
  timeout_seconds: 5
store:
  url: http://localhost:8086
  database: meteo
  batch_size: 1000
"""
    )

    assert config.fetch.cache_dir == Path("/var/cache/synop")
    assert config.fetch.timeout_seconds == 5.0
    assert config.store.enabled
    assert config.store.database == "meteo"
    assert config.store.batch_size == 1000
    assert config.store.measurement == "measurements"


def test_ingest_config_empty_yaml_is_default():
    assert IngestConfig.from_yaml("") == DEFAULT_INGEST_CONFIG


def test_ingest_config_rejects_unknown_keys():
    with pytest.raises(ValidationError):
        IngestConfig.from_yaml("store:\n  host: localhost\n")


def test_ingest_config_yaml_roundtrip(tmp_path):
    config = IngestConfig(
        fetch=FetchSettings(cache_dir=tmp_path / "cache"),
        store=StoreSettings(url="http://localhost:8086", user="admin", password="secret"),
    )

    path = tmp_path / "ingest.yaml"
    config.to_yaml_file(path)
    loaded = IngestConfig.from_file(path)

    assert loaded == config


def test_get_cache_path():
    assert get_cache_path(Path("/tmp/synop"), "202301") == Path("/tmp/synop/202301.csv")
