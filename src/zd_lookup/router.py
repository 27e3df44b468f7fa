"""
Request router: typed request messages in, typed response messages out.

The router is the one place where exceptions from the store, the
dictionary loader and the preference store become structured :class:`ErrorResponse` values.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, TypeAdapter, ValidationError

from . import loader
from .engine import MatchEngine
from .loader import DictionaryLoadError
from .models import (
    CheckGloballyOnRequest,
    DialectResponse,
    DialectSetResponse,
    ErrorResponse,
    GetDialectRequest,
    GloballyOnResponse,
    InitialSearchRequest,
    RangeResponse,
    ReloadCompleteResponse,
    ReloadDbRequest,
    Request,
    Response,
    ResultsResponse,
    SecondSearchRequest,
    SetDialectRequest,
    ToggleGloballyOnRequest,
)
from .preferences import PreferenceStore, PreferencesError
from .store import EntryStore, StoreError

logger = logging.getLogger("zd-lookup")

_request_adapter: TypeAdapter = TypeAdapter(Request)


class RequestRouter:
    """Dispatches request messages to the engine, store and preferences.

    Listeners registered with :meth:`add_listener` are called as
    ``listener(event_type, value)`` after the global toggle or dialect
    changes, e.g. ``("toggle-globally-on", False)``.

    Usage:
        router = RequestRouter(engine, store, PreferenceStore(), dictionary_path)
        response = await router.handle({"type": "initial-search", "term": "con"})
        response.range
    """

    def __init__(
        self,
        engine: MatchEngine,
        store: EntryStore,
        preferences: PreferenceStore,
        dictionary_path: Path,
    ) -> None:
        self.engine = engine
        self.store = store
        self.preferences = preferences
        self.dictionary_path = Path(dictionary_path)
        self._listeners: list[Callable[[str, Any], None]] = []

    def add_listener(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for preference changes."""
        self._listeners.append(callback)

    async def handle(self, message: dict[str, Any] | BaseModel) -> Response:
        """Validate and dispatch one request.

        Args:
            message: Raw message dict (with a ``type`` key) or a request model

        Returns:
            The response model; failures are returned as ErrorResponse
        """
        if isinstance(message, BaseModel):
            message = message.model_dump()
        try:
            request = _request_adapter.validate_python(message)
        except ValidationError as e:
            message_type = message.get("type") if isinstance(message, dict) else None
            logger.warning(f"⚠️ Invalid request of type {message_type!r}: {e.error_count()} errors")
            return ErrorResponse(kind="invalid-request", message=f"Invalid request: {message_type!r}")

        try:
            return await self._dispatch(request)
        except (StoreError, DictionaryLoadError, PreferencesError) as e:
            logger.error(f"❌ {request.type} failed: {e.message}")
            return ErrorResponse(kind=e.kind, message=e.message)

    async def _dispatch(self, request: Any) -> Response:
        if isinstance(request, InitialSearchRequest):
            span = await self.engine.max_phrase_length(request.term)
            return RangeResponse(range=span)

        if isinstance(request, SecondSearchRequest):
            results = await self.engine.resolve_ranked(request.candidates)
            return ResultsResponse(results=results)

        if isinstance(request, ReloadDbRequest):
            count = await loader.reload(self.store, self.dictionary_path)
            return ReloadCompleteResponse(count=count)

        if isinstance(request, CheckGloballyOnRequest):
            return GloballyOnResponse(status=self.preferences.is_globally_on())

        if isinstance(request, ToggleGloballyOnRequest):
            status = self.preferences.toggle_globally_on()
            self._notify(request.type, status)
            return GloballyOnResponse(status=status)

        if isinstance(request, GetDialectRequest):
            return DialectResponse(dialect=self.preferences.get_dialect())

        if isinstance(request, SetDialectRequest):
            dialect = self.preferences.set_dialect(request.dialect)
            self._notify(request.type, dialect)
            return DialectSetResponse(dialect=dialect)

        raise TypeError(f"Unhandled request type: {type(request).__name__}")

    def _notify(self, event_type: str, value: Any) -> None:
        for callback in self._listeners:
            try:
                callback(event_type, value)
            except Exception as e:
                logger.error(
                    f"Error in {event_type} listener: {e}",
                    exc_info=True,
                )
