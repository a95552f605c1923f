"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
import yaml

from forecast_api.config.schema import ServiceConfig

TEST_BASE_URL = "https://test-cwa.example.com/api"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def raw_document(fixtures_dir: Path) -> dict:
    """CWA township document with 卑南鄉 listed before 臺東市."""
    with open(fixtures_dir / "cwa_township_taitung.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def config() -> ServiceConfig:
    return ServiceConfig(api_key="test-key", base_url=TEST_BASE_URL)


@pytest.fixture
def keyless_config() -> ServiceConfig:
    return ServiceConfig(api_key="", base_url=TEST_BASE_URL)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {"port": 8080, "log_level": "debug"}
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
