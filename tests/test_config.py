"""Tests for settings and the shared dependency instances."""

import pytest
from pydantic import ValidationError

from chartindex.core import dependencies
from chartindex.core.config import (
    DATA_ROOT_ENV_VAR,
    INDEX_FILENAME_ENV_VAR,
    MIRROR_BASE_URL_ENV_VAR,
    PRIMARY_BASE_URL_ENV_VAR,
    IndexSettings,
    load_settings,
)
from chartindex.storage.file_index_store import FileIndexStore


def test_load_settings_from_environment(tmp_path):
    data_dir = tmp_path / "data"

    settings = load_settings(
        {
            DATA_ROOT_ENV_VAR: str(data_dir),
            INDEX_FILENAME_ENV_VAR: "charts.yaml",
            PRIMARY_BASE_URL_ENV_VAR: "s3://bucket/charts",
            MIRROR_BASE_URL_ENV_VAR: "https://charts.example.com",
        }
    )

    assert settings.data_dir == data_dir
    assert settings.index_path == data_dir / "charts.yaml"
    assert settings.primary_base_url == "s3://bucket/charts"
    assert settings.mirror_base_url == "https://charts.example.com"
    assert data_dir.is_dir()


def test_load_settings_defaults(tmp_path):
    settings = load_settings({DATA_ROOT_ENV_VAR: str(tmp_path)})

    assert settings.index_filename == "index.yaml"
    assert settings.primary_base_url == ""
    assert settings.mirror_base_url == ""


def test_index_filename_must_not_be_empty():
    with pytest.raises(ValidationError):
        IndexSettings(index_filename="")


@pytest.fixture
def fresh_dependencies(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_ROOT_ENV_VAR, str(tmp_path))
    monkeypatch.setenv(PRIMARY_BASE_URL_ENV_VAR, "https://example.com/charts")
    monkeypatch.delenv(MIRROR_BASE_URL_ENV_VAR, raising=False)
    monkeypatch.delenv(INDEX_FILENAME_ENV_VAR, raising=False)
    dependencies.reset_dependencies()
    yield tmp_path
    dependencies.reset_dependencies()


def test_dependencies_are_shared(fresh_dependencies):
    store = dependencies.get_index_store()

    assert isinstance(store, FileIndexStore)
    assert store.index_path == fresh_dependencies / "index.yaml"
    assert dependencies.get_index_store() is store
    assert dependencies.get_settings() is dependencies.get_settings()
    assert dependencies.get_publisher().store is store


def test_reset_dependencies(fresh_dependencies):
    first = dependencies.get_settings()

    dependencies.reset_dependencies()

    assert dependencies.get_settings() is not first
