from __future__ import annotations

import importlib

import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("test", "config.testing"),
        (" testing ", "config.testing"),
        ("dev", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_by_name(env, expected):
    assert get_settings_module(env) == expected


def test_settings_module_from_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert get_settings_module() == "config.production"
    monkeypatch.delenv("APP_ENV")
    assert get_settings_module() == "config.development"


def test_testing_settings_use_json_snapshot():
    settings = importlib.import_module("config.testing")
    assert settings.STORAGE_BACKEND == "json"
    assert settings.MAX_UPLOAD_MB >= 1
