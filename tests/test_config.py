"""
Tests for settings loading.
"""

from pathlib import Path

import pytest

from zd_lookup.config import Settings, load_settings
from zd_lookup.loader import DEFAULT_DICTIONARY_PATH


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("ZD_DATA_DIR", "ZD_DICTIONARY_PATH", "ZD_MAX_ENTRIES", "ZD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    """Test environment-driven settings."""

    def test_defaults(self, tmp_path: Path):
        settings = load_settings()
        assert settings.data_dir == (tmp_path / "zd_data").resolve()
        assert settings.dictionary_path == DEFAULT_DICTIONARY_PATH
        assert settings.max_entries is None
        assert settings.store_path.name == "entries.json"
        assert settings.preferences_path.name == "preferences.json"

    def test_environment(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("ZD_DATA_DIR", str(tmp_path / "custom"))
        monkeypatch.setenv("ZD_MAX_ENTRIES", "500")
        monkeypatch.setenv("ZD_LOG_LEVEL", "INFO")
        settings = load_settings()
        assert settings.data_dir == (tmp_path / "custom").resolve()
        assert settings.max_entries == 500
        assert settings.log_level == "INFO"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".env").write_text("ZD_MAX_ENTRIES=42\n", encoding="utf-8")
        settings = load_settings()
        assert settings.max_entries == 42

    def test_invalid_quota(self):
        with pytest.raises(ValueError):
            Settings(max_entries=0)
