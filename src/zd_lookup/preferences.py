"""
User preferences: global on/off toggle and dialect selection.

Kept apart from the entry store; the search core never reads these.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ValidationError

logger = logging.getLogger("zd-lookup")

DEFAULT_DIALECT = "hanoi"


class Preferences(BaseModel):
    """Persisted user preferences.

    Attributes:
        globally_on: Whether lookups are enabled everywhere
        dialect: Pronunciation dialect (e.g., "hanoi", "saigon")
    """
    globally_on: bool = True
    dialect: str = DEFAULT_DIALECT


class PreferencesError(Exception):
    """Raised when preferences could not be saved."""
    kind = "preferences"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PreferenceStore:
    """Small JSON-backed key-value store for :class:`Preferences`.

    With ``path=None`` preferences live in memory only. Changes take effect
    in memory only once they have been saved.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._prefs = self._load()

    def get(self) -> Preferences:
        return self._prefs.model_copy()

    def is_globally_on(self) -> bool:
        return self._prefs.globally_on

    def toggle_globally_on(self) -> bool:
        """Flip the global toggle and return the new status.

        Raises:
            PreferencesError: If the change could not be saved
        """
        updated = self._prefs.model_copy(update={"globally_on": not self._prefs.globally_on})
        self._save(updated)
        self._prefs = updated
        return updated.globally_on

    def get_dialect(self) -> str:
        return self._prefs.dialect

    def set_dialect(self, dialect: str | None) -> str:
        """Set the dialect; blank or missing values fall back to the default.

        Raises:
            PreferencesError: If the change could not be saved
        """
        new_dialect = (dialect or "").strip() or DEFAULT_DIALECT
        logger.info(f"🗣️ Setting dialect to: {new_dialect}")
        updated = self._prefs.model_copy(update={"dialect": new_dialect})
        self._save(updated)
        self._prefs = updated
        return new_dialect

    def _load(self) -> Preferences:
        if self.path is None or not self.path.exists():
            return Preferences()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return Preferences.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"⚠️ Failed to load preferences from {self.path}, using defaults: {e}")
            return Preferences()

    def _save(self, prefs: Preferences) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(prefs.model_dump(mode="json"), f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"❌ Failed to save preferences to {self.path}: {e}")
            raise PreferencesError(f"Could not save preferences to {self.path}: {e}") from e
        logger.debug(f"💾 Saved preferences to {self.path}")
