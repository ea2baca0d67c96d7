"""Tests for settings from environment."""

from pathlib import Path

from editorstore.config import Settings, get_settings


def test_env_overrides(monkeypatch, tmp_path: Path) -> None:
    """EDITORSTORE_* variables override defaults."""
    monkeypatch.setenv("EDITORSTORE_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("EDITORSTORE_PORT", "9999")
    monkeypatch.setenv("EDITORSTORE_LOG_LEVEL", "DEBUG")
    s = get_settings()
    assert s.db_path == tmp_path / "x.db"
    assert s.port == 9999
    assert s.log_level == "DEBUG"


def test_cors_origins_list(monkeypatch) -> None:
    """Comma-separated origins are split and stripped; empty falls back to the default."""
    monkeypatch.setenv("EDITORSTORE_CORS_ORIGINS", "http://a.test, http://b.test ,")
    assert get_settings().cors_origins_list == ["http://a.test", "http://b.test"]
    assert Settings(cors_origins="").cors_origins_list == ["http://localhost:3000"]
