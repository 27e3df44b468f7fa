"""
Persisted entry store with explicit exact-match and prefix indexes.

Entries live in an append-only arena; an entry's identity is its position
in the arena. Two indexes are derived from the arena:

- exact index: normalized source phrase -> identities sharing it
- prefix index: sorted list of distinct normalized source phrases,
  searched with bisect

The arena and both indexes are held together in one immutable snapshot.
Writers build a complete replacement snapshot, persist it, and only then
swap the reference, so a reader sees either the old or the new state.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import unicodedata
from bisect import bisect_left
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from .models import Entry

logger = logging.getLogger("zd-lookup")

STORE_FORMAT_VERSION = 1


# ---------------------------------------------------------------------------
# Custom Exceptions
# ---------------------------------------------------------------------------


class StoreError(Exception):
    """Base exception for entry store failures.

    Attributes:
        kind: Short error kind used in structured responses
        message: Human-readable description
    """
    kind = "store"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreWriteError(StoreError):
    """Raised when a bulk load or clear could not be committed."""
    kind = "write"


class StoreReadError(StoreError):
    """Raised when a query or open could not complete."""
    kind = "read"


def normalize(text: str) -> str:
    """Normalize a phrase for case-insensitive comparison.

    Composes the text to NFC (so precomposed and combining accents compare
    equal), case-folds it and collapses whitespace runs. Accents are kept.

    Example:
        >>> normalize("  Con   CHÓ ")
        'con chó'
    """
    composed = unicodedata.normalize("NFC", text)
    return " ".join(composed.casefold().split())


@dataclass(frozen=True)
class _Snapshot:
    """Arena plus derived indexes. Never mutated after construction."""
    entries: tuple[Entry, ...] = ()
    exact: Mapping[str, tuple[int, ...]] = field(default_factory=dict)
    keys: tuple[str, ...] = ()

    @classmethod
    def build(cls, entries: Iterable[Entry]) -> _Snapshot:
        arena = tuple(entries)
        exact: dict[str, list[int]] = {}
        for identity, entry in enumerate(arena):
            exact.setdefault(normalize(entry.vn), []).append(identity)
        return cls(
            entries=arena,
            exact={key: tuple(ids) for key, ids in exact.items()},
            keys=tuple(sorted(exact)),
        )


class EntryStore:
    """Key -> entry store supporting bulk load, clear, prefix and set lookups.

    A store created with a ``path`` persists to a single JSON document and
    must be opened with :meth:`open` before use. A store created without a
    path is purely in-memory and starts empty.

    Mutations (:meth:`bulk_load`, :meth:`clear`) are serialized by an
    ``asyncio.Lock``. Reads never take the lock; they run against whichever
    snapshot is current when they start.

    Usage:
        store = EntryStore(Path("zd_data/entries.json"))
        await store.open()
        await store.bulk_load([Entry(vn="con chó", en="dog")])
        await store.prefix_keys("con")   # {"con chó"}
    """

    def __init__(self, path: str | Path | None = None, max_entries: int | None = None) -> None:
        """Initialize the store.

        Args:
            path: JSON file to persist to, or None for an in-memory store
            max_entries: Optional quota; loads that would exceed it fail
        """
        self.path = Path(path) if path is not None else None
        self.max_entries = max_entries
        self._lock = asyncio.Lock()
        self._snapshot: _Snapshot | None = _Snapshot() if self.path is None else None

    @property
    def is_open(self) -> bool:
        return self._snapshot is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> int:
        """Load the persisted entries and rebuild both indexes.

        A missing file yields an empty store. In-memory stores are a no-op.

        Returns:
            Number of entries loaded

        Raises:
            StoreReadError: If the file exists but cannot be read or parsed
        """
        async with self._lock:
            if self.path is None:
                return len(self._snapshot.entries)

            entries = await asyncio.to_thread(self._read_file, self.path)
            self._snapshot = _Snapshot.build(entries)
            logger.debug(f"📂 Opened entry store {self.path} ({len(entries)} entries)")
            return len(entries)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def bulk_load(self, entries: Iterable[Entry | Mapping[str, Any]]) -> int:
        """Insert every entry as one atomic unit.

        Args:
            entries: Entries (or ``{"vn", "en"}`` mappings) to append

        Returns:
            Number of entries in the store afterwards

        Raises:
            StoreWriteError: If a record is invalid, the quota would be
                exceeded, or the write could not be persisted. The prior
                state is left untouched.
        """
        batch = self._validate_batch(entries)

        async with self._lock:
            current = self._require_open_for_write()
            if not batch:
                return len(current.entries)

            total = len(current.entries) + len(batch)
            self._check_quota(total)

            replacement = _Snapshot.build(current.entries + tuple(batch))
            await self._persist(replacement)
            self._snapshot = replacement
            logger.debug(f"✅ Bulk loaded {len(batch)} entries ({total} total)")
            return total

    async def replace(self, entries: Iterable[Entry | Mapping[str, Any]]) -> int:
        """Swap the whole store contents for ``entries`` in one write.

        Equivalent to :meth:`clear` followed by :meth:`bulk_load`, except that
        no reader or writer can run between the two halves.

        Returns:
            Number of entries in the store afterwards

        Raises:
            StoreWriteError: As for :meth:`bulk_load`; the prior state is kept
        """
        batch = self._validate_batch(entries)

        async with self._lock:
            self._require_open_for_write()
            self._check_quota(len(batch))

            replacement = _Snapshot.build(batch)
            await self._persist(replacement)
            self._snapshot = replacement
            logger.debug(f"✅ Replaced store contents ({len(batch)} entries)")
            return len(batch)

    async def load_if_empty(self, entries: Iterable[Entry | Mapping[str, Any]]) -> int:
        """Bulk load ``entries`` only if the store holds no entries.

        The emptiness check and the load happen under the writer lock, so
        concurrent callers load the entries at most once.

        Returns:
            Number of entries in the store afterwards
        """
        batch = self._validate_batch(entries)

        async with self._lock:
            current = self._require_open_for_write()
            if current.entries or not batch:
                return len(current.entries)
            self._check_quota(len(batch))

            replacement = _Snapshot.build(batch)
            await self._persist(replacement)
            self._snapshot = replacement
            logger.debug(f"✅ Loaded {len(batch)} entries into empty store")
            return len(batch)

    async def clear(self) -> None:
        """Remove all entries and both indexes. Idempotent.

        Raises:
            StoreWriteError: If the empty state could not be persisted
        """
        async with self._lock:
            self._require_open_for_write()
            replacement = _Snapshot()
            await self._persist(replacement)
            self._snapshot = replacement
            logger.debug("🗑️ Entry store cleared")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def count(self) -> int:
        return len(self._require_open_for_read().entries)

    async def prefix_keys(self, term: str) -> set[str]:
        """Return every distinct normalized source phrase whose first word is ``term``.

        Matches phrases beginning with ``term + " "``, so single-word
        entries equal to ``term`` are not included.
        """
        snapshot = self._require_open_for_read()
        prefix = normalize(term)
        if not prefix:
            return set()
        prefix += " "

        keys = snapshot.keys
        matched: set[str] = set()
        index = bisect_left(keys, prefix)
        while index < len(keys) and keys[index].startswith(prefix):
            matched.add(keys[index])
            index += 1
        return matched

    async def resolve_any(self, phrases: Iterable[str]) -> list[Entry]:
        """Return every entry whose source phrase matches any of ``phrases``.

        Comparison is on normalized phrases. Each stored identity appears
        once, in insertion order.
        """
        snapshot = self._require_open_for_read()
        identities: set[int] = set()
        for phrase in phrases:
            identities.update(snapshot.exact.get(normalize(phrase), ()))
        return [snapshot.entries[identity] for identity in sorted(identities)]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_open_for_read(self) -> _Snapshot:
        if self._snapshot is None:
            raise StoreReadError("Entry store has not been opened")
        return self._snapshot

    def _require_open_for_write(self) -> _Snapshot:
        if self._snapshot is None:
            raise StoreWriteError("Entry store has not been opened")
        return self._snapshot

    @staticmethod
    def _validate_batch(entries: Iterable[Entry | Mapping[str, Any]]) -> list[Entry]:
        batch: list[Entry] = []
        for position, item in enumerate(entries):
            if isinstance(item, Entry):
                batch.append(item)
                continue
            try:
                batch.append(Entry.model_validate(item))
            except ValidationError as e:
                raise StoreWriteError(f"Invalid entry at position {position}: {e}") from e
        return batch

    def _check_quota(self, total: int) -> None:
        if self.max_entries is not None and total > self.max_entries:
            raise StoreWriteError(
                f"Quota exceeded: {total} entries requested, limit is {self.max_entries}"
            )

    async def _persist(self, snapshot: _Snapshot) -> None:
        if self.path is None:
            return
        try:
            await asyncio.to_thread(self._write_file, self.path, snapshot.entries)
        except OSError as e:
            logger.error(f"❌ Failed to persist entry store to {self.path}: {e}")
            raise StoreWriteError(f"Could not write {self.path}: {e}") from e

    @staticmethod
    def _read_file(path: Path) -> list[Entry]:
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreReadError(f"Could not read {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise StoreReadError(f"{path} is not an entry store document")
        if data.get("version") != STORE_FORMAT_VERSION:
            raise StoreReadError(f"{path} has unsupported version {data.get('version')!r}")

        try:
            return [Entry.model_validate(record) for record in data["entries"]]
        except ValidationError as e:
            raise StoreReadError(f"{path} contains an invalid entry: {e}") from e

    @staticmethod
    def _write_file(path: Path, entries: tuple[Entry, ...]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "version": STORE_FORMAT_VERSION,
            "entries": [entry.model_dump() for entry in entries],
        }
        # Write beside the target then rename, so the old file survives a failed write
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
