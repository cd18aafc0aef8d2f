"""Shared test fixtures for the cconf test suite."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from cconf.config import Config


@pytest.fixture
def fixtures_dir() -> Path:
    """Returns the absolute path to the tests/fixtures/ directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def config_dir(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Copies fixture files to a temp directory for test isolation."""
    dest = tmp_path / "conf"
    shutil.copytree(fixtures_dir, dest, dirs_exist_ok=True)
    return dest


@pytest.fixture
def app_json(config_dir: Path) -> str:
    """Path of the sample application JSON file."""
    return str(config_dir / "app.json")


@pytest.fixture
def override_yaml(config_dir: Path) -> str:
    """Path of a YAML file overriding part of app.json."""
    return str(config_dir / "override.yaml")


@pytest.fixture
def config() -> Config:
    """An empty Config."""
    return Config()


@pytest.fixture
def loaded_config(app_json: str) -> Config:
    """Config loaded from app.json."""
    c = Config()
    c.load(app_json)
    return c
