"""Tests for storyforge.config — backend URL resolution."""

from storyforge.config import (
    DEFAULT_TIMEOUT,
    Settings,
    fallback_backend_url,
    load_settings,
    resolve_backend_url,
)


def test_fallback_swaps_frontend_port():
    assert fallback_backend_url("http://localhost:3000") == "http://localhost:8000"


def test_fallback_keeps_origin_without_frontend_port():
    assert fallback_backend_url("https://stories.example.com") == "https://stories.example.com"


def test_configured_url_wins():
    assert resolve_backend_url("http://api.local:9000/", "http://localhost:3000") == "http://api.local:9000"


def test_blank_configured_url_falls_back():
    assert resolve_backend_url("   ", "http://localhost:3000") == "http://localhost:8000"


def test_load_settings_defaults():
    settings = load_settings()
    assert settings == Settings(backend_url="http://localhost:8000", timeout=DEFAULT_TIMEOUT)


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("STORYFORGE_BACKEND_URL", "http://backend:8080")
    monkeypatch.setenv("STORYFORGE_TIMEOUT", "5")
    settings = load_settings()
    assert settings.backend_url == "http://backend:8080"
    assert settings.timeout == 5.0


def test_load_settings_origin_fallback(monkeypatch):
    monkeypatch.setenv("STORYFORGE_ORIGIN", "http://10.0.0.7:3000")
    assert load_settings().backend_url == "http://10.0.0.7:8000"
