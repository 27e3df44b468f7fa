"""
Tests for PreferenceStore.
"""

import json
from pathlib import Path

import pytest

from zd_lookup.preferences import (
    DEFAULT_DIALECT,
    PreferenceStore,
    Preferences,
    PreferencesError,
)


class TestPreferenceStore:
    """Test toggle and dialect preferences."""

    def test_defaults(self):
        prefs = PreferenceStore()
        assert prefs.is_globally_on() is True
        assert prefs.get_dialect() == DEFAULT_DIALECT == "hanoi"

    def test_toggle(self):
        prefs = PreferenceStore()
        assert prefs.toggle_globally_on() is False
        assert prefs.toggle_globally_on() is True

    def test_set_dialect(self):
        prefs = PreferenceStore()
        assert prefs.set_dialect("saigon") == "saigon"
        assert prefs.get_dialect() == "saigon"

    def test_blank_dialect_falls_back(self):
        prefs = PreferenceStore()
        prefs.set_dialect("saigon")
        assert prefs.set_dialect(None) == "hanoi"
        assert prefs.set_dialect("  ") == "hanoi"

    def test_get_returns_copy(self):
        prefs = PreferenceStore()
        snapshot = prefs.get()
        snapshot.dialect = "hue"
        assert prefs.get_dialect() == "hanoi"

    def test_persisted(self, tmp_path: Path):
        path = tmp_path / "preferences.json"
        prefs = PreferenceStore(path)
        prefs.toggle_globally_on()
        prefs.set_dialect("saigon")

        reloaded = PreferenceStore(path)
        assert reloaded.get() == Preferences(globally_on=False, dialect="saigon")

    def test_corrupt_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "preferences.json"
        path.write_text("not json", encoding="utf-8")
        assert PreferenceStore(path).get() == Preferences()

    def test_invalid_values_use_defaults(self, tmp_path: Path):
        path = tmp_path / "preferences.json"
        path.write_text(json.dumps({"globally_on": "maybe"}), encoding="utf-8")
        assert PreferenceStore(path).is_globally_on() is True

    def test_failed_save_keeps_previous_values(self, tmp_path: Path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        prefs = PreferenceStore(blocker / "preferences.json")

        with pytest.raises(PreferencesError) as exc_info:
            prefs.toggle_globally_on()
        assert exc_info.value.kind == "preferences"
        assert prefs.is_globally_on() is True

        with pytest.raises(PreferencesError):
            prefs.set_dialect("saigon")
        assert prefs.get_dialect() == "hanoi"

    def test_save_leaves_no_temp_files(self, tmp_path: Path):
        prefs = PreferenceStore(tmp_path / "preferences.json")
        prefs.set_dialect("saigon")
        assert [p.name for p in tmp_path.iterdir()] == ["preferences.json"]
