"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from bundle_analyser.config import Settings, settings


def test_testing_environment_detected():
    assert settings.is_testing is True
    assert settings.environment == "testing"


def test_original_variable_names(monkeypatch):
    monkeypatch.setenv("IMPORT_MAP", "https://cdn.example.com/importmap.json")
    monkeypatch.setenv("DAYS_TO_KEEP", "14")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("SNAPSHOT_TABLE", "sizes")

    loaded = Settings()

    assert loaded.import_map_url == "https://cdn.example.com/importmap.json"
    assert loaded.retention_days == 14
    assert loaded.port == 8080
    assert loaded.snapshot_table == "sizes"


def test_defaults(monkeypatch):
    for name in ("IMPORT_MAP", "DAYS_TO_KEEP", "PORT", "HTTP_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    loaded = Settings()

    assert loaded.import_map_url is None
    assert loaded.retention_days == 30
    assert loaded.port == 3000
    assert loaded.http_timeout_seconds == 30.0


def test_negative_retention_rejected(monkeypatch):
    monkeypatch.setenv("DAYS_TO_KEEP", "-1")
    with pytest.raises(ValidationError, match="DAYS_TO_KEEP"):
        Settings()


def test_zero_timeout_rejected(monkeypatch):
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_cors_origins_list():
    loaded = Settings(cors_origins="http://a.test, http://b.test,")
    assert loaded.cors_origins_list == ["http://a.test", "http://b.test"]
