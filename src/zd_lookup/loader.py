"""
Bulk loading of dictionary resources into an EntryStore.
"""

import asyncio
import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import Entry
from .store import EntryStore

logger = logging.getLogger("zd-lookup")

DEFAULT_DICTIONARY_PATH = Path(__file__).parent / "data" / "vnedict.json"


class DictionaryLoadError(Exception):
    """Raised when a dictionary resource cannot be read or parsed."""
    kind = "load"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def read_entries(path: Path) -> list[Entry]:
    """Read dictionary entries from a JSON or YAML resource.

    Expected JSON format (a top-level array):
        [{"vn": "con chó", "en": "dog"}, ...]

    Expected YAML format:
        entries:
          - vn: con chó
            en: dog

    Args:
        path: Path to a ``.json``, ``.yaml`` or ``.yml`` file

    Returns:
        Entries in file order

    Raises:
        DictionaryLoadError: If the file is missing, malformed, or a record
            is missing a field
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
                records = data.get("entries") if isinstance(data, dict) else None
            else:
                records = json.load(f)
    except FileNotFoundError as e:
        raise DictionaryLoadError(f"Dictionary resource not found: {path}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise DictionaryLoadError(f"Could not parse dictionary resource {path}: {e}") from e

    if not isinstance(records, list):
        raise DictionaryLoadError(f"Dictionary resource {path} must contain a list of entries")

    entries = []
    for position, record in enumerate(records):
        try:
            entries.append(Entry.model_validate(record))
        except ValidationError as e:
            raise DictionaryLoadError(f"Invalid entry at position {position} in {path}: {e}") from e
    return entries


async def populate_from(store: EntryStore, path: Path) -> int:
    """Read a dictionary resource and bulk load it into ``store``.

    Returns:
        Number of entries in the store afterwards
    """
    entries = await _read_async(path)
    count = await store.bulk_load(entries)
    logger.info(f"✅ Committed {count} entries.")
    return count


async def reload(store: EntryStore, path: Path) -> int:
    """Replace the store contents with the dictionary at ``path``.

    The resource is parsed first and the swap is a single store write, so
    a broken resource or a failed write leaves the current entries in place
    and concurrent reloads never stack their entries.
    """
    logger.info("🔄 Reloading dictionary...")
    entries = await _read_async(path)
    count = await store.replace(entries)
    logger.info(f"✅ Committed {count} entries.")
    return count


async def ensure_populated(store: EntryStore, path: Path) -> int:
    """Load the dictionary only if the store is empty.

    Returns:
        Number of entries in the store afterwards
    """
    count = await store.count()
    if count:
        logger.debug(f"📚 Database already populated ({count} entries).")
        return count
    logger.info("📚 Database empty. Loading dictionary...")
    entries = await _read_async(path)
    count = await store.load_if_empty(entries)
    logger.info(f"✅ Committed {count} entries.")
    return count


async def _read_async(path: Path) -> list[Entry]:
    """Run :func:`read_entries` off the event loop."""
    return await asyncio.to_thread(read_entries, path)
