"""
Runtime settings read from the environment (and a .env file, if present).
"""

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from .loader import DEFAULT_DICTIONARY_PATH

logger = logging.getLogger("zd-lookup")


class Settings(BaseModel):
    """Service settings.

    Attributes:
        data_dir: Directory holding the entry store and preferences files
        dictionary_path: Dictionary resource used to (re)populate the store
        max_entries: Optional entry quota for the store
        log_level: Logging level name
    """
    data_dir: Path = Field(default=Path("zd_data"))
    dictionary_path: Path = Field(default=DEFAULT_DICTIONARY_PATH)
    max_entries: int | None = Field(default=None, ge=1)
    log_level: str = "DEBUG"

    @property
    def store_path(self) -> Path:
        return self.data_dir / "entries.json"

    @property
    def preferences_path(self) -> Path:
        return self.data_dir / "preferences.json"


def load_settings() -> Settings:
    """Build Settings from ``ZD_*`` environment variables.

    Environment:
        ZD_DATA_DIR: data directory (default ``zd_data``)
        ZD_DICTIONARY_PATH: dictionary resource (default: bundled vnedict.json)
        ZD_MAX_ENTRIES: entry quota (default: unlimited)
        ZD_LOG_LEVEL: logging level (default ``DEBUG``)
    """
    if not load_dotenv(find_dotenv(usecwd=True)):
        logger.debug(".env file not found, using environment and defaults")

    values: dict[str, str] = {}
    for field_name, env_name in (
        ("data_dir", "ZD_DATA_DIR"),
        ("dictionary_path", "ZD_DICTIONARY_PATH"),
        ("max_entries", "ZD_MAX_ENTRIES"),
        ("log_level", "ZD_LOG_LEVEL"),
    ):
        value = os.getenv(env_name)
        if value:
            values[field_name] = value

    settings = Settings.model_validate(values)
    settings.data_dir = settings.data_dir.resolve()
    return settings
