"""
Two-phase longest-match search over an EntryStore.
"""

import logging
from typing import Iterable

from .candidates import build_candidates
from .models import Entry
from .store import EntryStore, normalize

logger = logging.getLogger("zd-lookup")


class MatchEngine:
    """Finds the longest dictionary phrase starting at a given word.

    Phase 1 (:meth:`max_phrase_length`) bounds how many words a match
    starting at a term could span. The caller then builds candidate
    phrases up to that length from its text, and phase 2
    (:meth:`resolve_ranked`) resolves them against the store, longest first.

    The engine holds no state of its own; store errors propagate unchanged.

    Example:
        >>> engine = MatchEngine(store)
        >>> await engine.max_phrase_length("con")
        3
        >>> [e.en for e in await engine.resolve_ranked({"con chó con", "con chó"})]
        ['puppy', 'dog']
    """

    def __init__(self, store: EntryStore) -> None:
        self.store = store

    async def max_phrase_length(self, term: str) -> int:
        """Return the largest word count among phrases whose first word is ``term``.

        Returns 1 when no multi-word phrase starts with ``term``; a single
        word match is still attempted downstream.
        """
        keys = await self.store.prefix_keys(term)
        if not keys:
            return 1
        return max(len(key.split(" ")) for key in keys)

    async def resolve_ranked(self, candidates: Iterable[str]) -> list[Entry]:
        """Resolve candidates and order matches by source word count, descending.

        Entries with the same word count keep insertion order.
        """
        candidates = set(candidates)
        if not candidates:
            return []
        results = await self.store.resolve_any(candidates)
        results.sort(key=lambda entry: entry.word_count, reverse=True)
        return results

    async def lookup(self, words: list[str], start: int = 0) -> list[Entry]:
        """Run both phases for the word at ``words[start]``.

        Args:
            words: Tokenized text (see :func:`candidates.split_words`)
            start: Index of the word the lookup starts at

        Returns:
            Ranked matches; the first entry is the longest match
        """
        if start < 0 or start >= len(words):
            return []
        span = await self.max_phrase_length(normalize(words[start]))
        candidates = build_candidates(words, start, span)
        results = await self.resolve_ranked(candidates)
        logger.debug(
            f"🔎 Lookup at '{words[start]}': span {span}, "
            f"{len(candidates)} candidates, {len(results)} matches"
        )
        return results
