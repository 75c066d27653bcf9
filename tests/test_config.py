"""Tests for environment-driven settings."""

import pytest

from src.config import AppSettings, StorageSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LEDGER_STORE_BACKEND", raising=False)
        monkeypatch.delenv("LEDGER_STORE_PATH", raising=False)

        settings = StorageSettings()
        assert settings.backend == "file"
        assert settings.path == "data/ledger_store.json"

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORE_BACKEND", "redis")

        with pytest.raises(ValueError):
            StorageSettings()

    def test_directory_path_rejected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LEDGER_STORE_PATH", str(tmp_path))

        with pytest.raises(ValueError):
            StorageSettings()


class TestAppSettings:

    def test_overwrite_off_by_default(self, monkeypatch):
        monkeypatch.delenv("LEDGER_ALLOW_OVERWRITE", raising=False)
        assert AppSettings().allow_overwrite is False

    def test_overwrite_from_environment(self, monkeypatch):
        monkeypatch.setenv("LEDGER_ALLOW_OVERWRITE", "true")
        assert AppSettings().allow_overwrite is True


class TestValidateAllSettings:

    def test_all_valid(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORE_BACKEND", "memory")

        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is True

    def test_bad_storage_reported(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORE_BACKEND", "redis")

        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
        assert results["app"] is True
