"""Tests for settings loading."""

from app.core.config import Settings, get_settings


def test_defaults():
    cfg = Settings()
    assert cfg.database_url.startswith("postgresql+asyncpg://")
    assert cfg.port == 8000
    assert cfg.log_format == "json"
    assert "http://localhost:5173" in cfg.cors_origins
    assert "http://localhost:3000" in cfg.cors_origins
    assert cfg.seed_sample_data is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TB_DATABASE_URL", "sqlite+aiosqlite:///./tasks.db")
    monkeypatch.setenv("TB_PORT", "9001")
    monkeypatch.setenv("TB_SEED_SAMPLE_DATA", "true")
    monkeypatch.setenv("TB_CORS_ORIGINS", '["https://tasks.example.com"]')

    cfg = Settings()
    assert cfg.database_url == "sqlite+aiosqlite:///./tasks.db"
    assert cfg.port == 9001
    assert cfg.seed_sample_data is True
    assert cfg.cors_origins == ["https://tasks.example.com"]


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
