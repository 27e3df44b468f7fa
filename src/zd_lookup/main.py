"""
Dictionary lookup MCP server.
Exposes the two-phase phrase lookup and the preference controls as FastMCP tools.
"""

import asyncio
import logging
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field

from .candidates import split_words
from .config import load_settings
from .engine import MatchEngine
from .loader import DictionaryLoadError, ensure_populated
from .models import ErrorResponse
from .preferences import PreferenceStore
from .router import RequestRouter
from .store import EntryStore, StoreError

logger = logging.getLogger("zd-lookup")

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.DEBUG),
    )

logger.debug(f"📂 Data path: {settings.data_dir}")

store = EntryStore(settings.store_path, max_entries=settings.max_entries)
preferences = PreferenceStore(settings.preferences_path)
engine = MatchEngine(store)
router = RequestRouter(engine, store, preferences, settings.dictionary_path)
logger.debug("✅ Entry store and router initialized")

mcp = FastMCP(
    name="zd-lookup"
)

_startup_lock = asyncio.Lock()
_started = False


async def startup() -> int:
    """Open the entry store and load the bundled dictionary if it is empty."""
    await store.open()
    return await ensure_populated(store, settings.dictionary_path)


async def _ensure_started() -> None:
    global _started
    if _started:
        return
    async with _startup_lock:
        if not _started:
            await startup()
            _started = True


async def _route(message: dict[str, Any]) -> dict[str, Any]:
    try:
        await _ensure_started()
    except (StoreError, DictionaryLoadError) as e:
        return ErrorResponse(kind=e.kind, message=e.message).model_dump()
    response = await router.handle(message)
    return response.model_dump()


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------

@mcp.tool
async def initial_search(
    term: Annotated[str, Field(description="Lower-cased starting word")],
) -> dict[str, Any]:
    """Return the longest phrase length (in words) worth trying from this word."""
    return await _route({"type": "initial-search", "term": term})


@mcp.tool
async def second_search(
    candidates: Annotated[list[str], Field(description="Candidate phrases to resolve")],
) -> dict[str, Any]:
    """Resolve candidate phrases; matches come back longest first."""
    return await _route({"type": "second-search", "candidates": candidates})


@mcp.tool
async def reload_db() -> dict[str, Any]:
    """Clear the entry store and reload it from the dictionary resource."""
    return await _route({"type": "reload-db"})


@mcp.tool
async def check_globally_on() -> dict[str, Any]:
    """Report whether lookups are globally enabled."""
    return await _route({"type": "check-globally-on"})


@mcp.tool
async def toggle_globally_on() -> dict[str, Any]:
    """Flip the global on/off toggle."""
    return await _route({"type": "toggle-globally-on"})


@mcp.tool
async def get_dialect() -> dict[str, Any]:
    """Get the selected dialect."""
    return await _route({"type": "get-dialect"})


@mcp.tool
async def set_dialect(
    dialect: Annotated[str | None, Field(description="Dialect name, e.g. 'hanoi' or 'saigon'")] = None,
) -> dict[str, Any]:
    """Select a dialect (defaults to 'hanoi')."""
    return await _route({"type": "set-dialect", "dialect": dialect})


@mcp.tool
async def lookup_text(
    text: Annotated[str, Field(description="Text containing the word to look up")],
    position: Annotated[int, Field(description="Index of the starting word in the text", ge=0)] = 0,
) -> dict[str, Any]:
    """Find the longest dictionary phrase starting at a word of the given text."""
    words = split_words(text)
    try:
        await _ensure_started()
        results = await engine.lookup(words, position)
    except (StoreError, DictionaryLoadError) as e:
        return ErrorResponse(kind=e.kind, message=e.message).model_dump()
    return {
        "type": "results",
        "match": results[0].vn if results else None,
        "results": [entry.model_dump() for entry in results],
    }


def main() -> None:
    """Run the MCP server."""
    logger.info("🚀 Starting zd-lookup server")
    mcp.run()


if __name__ == "__main__":
    main()
