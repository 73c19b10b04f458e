import importlib
from types import SimpleNamespace

import pytest

from face_attendance.config import get_settings_module
from face_attendance.container import build_container


def test_settings_module_follows_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert get_settings_module() == "face_attendance.config.production"

    monkeypatch.setenv("APP_ENV", "testing")
    assert get_settings_module() == "face_attendance.config.testing"

    monkeypatch.delenv("APP_ENV")
    assert get_settings_module() == "face_attendance.config.development"


def test_testing_settings_use_memory_backend(monkeypatch):
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)

    module = importlib.reload(importlib.import_module("face_attendance.config.testing"))

    assert module.STORAGE_BACKEND == "memory"
    assert module.TESTING is True


def test_container_from_testing_settings(monkeypatch):
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    settings = importlib.reload(importlib.import_module("face_attendance.config.testing"))

    container = build_container(settings)

    assert container.conn is None
    assert container.store.dimension == settings.EMBEDDING_DIMENSION
    container.close()


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        build_container(SimpleNamespace(STORAGE_BACKEND="redis"))
