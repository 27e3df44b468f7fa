"""
Data models for dictionary lookup.

Holds the immutable dictionary Entry and the typed request/response
messages exchanged with the request router.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Entry(BaseModel):
    """A single bilingual dictionary definition.

    Attributes:
        vn: Source phrase (Vietnamese), one or more space-separated words
        en: Target phrase (English definition)
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    vn: str = Field(..., description="Source phrase")
    en: str = Field(..., description="Target phrase")

    @field_validator("vn")
    @classmethod
    def _source_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source phrase must not be blank")
        return value

    @property
    def word_count(self) -> int:
        """Number of whitespace-separated words in the source phrase."""
        return len(self.vn.split())


# ----------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------

class InitialSearchRequest(BaseModel):
    """Phase 1: ask how many words a match starting at ``term`` can span."""
    type: Literal["initial-search"] = "initial-search"
    term: str


class SecondSearchRequest(BaseModel):
    """Phase 2: resolve and rank candidate phrases."""
    type: Literal["second-search"] = "second-search"
    candidates: list[str] = Field(default_factory=list)


class ReloadDbRequest(BaseModel):
    type: Literal["reload-db"] = "reload-db"


class CheckGloballyOnRequest(BaseModel):
    type: Literal["check-globally-on"] = "check-globally-on"


class ToggleGloballyOnRequest(BaseModel):
    type: Literal["toggle-globally-on"] = "toggle-globally-on"


class GetDialectRequest(BaseModel):
    type: Literal["get-dialect"] = "get-dialect"


class SetDialectRequest(BaseModel):
    type: Literal["set-dialect"] = "set-dialect"
    dialect: str | None = None


Request = Annotated[
    Union[
        InitialSearchRequest,
        SecondSearchRequest,
        ReloadDbRequest,
        CheckGloballyOnRequest,
        ToggleGloballyOnRequest,
        GetDialectRequest,
        SetDialectRequest,
    ],
    Field(discriminator="type"),
]


# ----------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------

class RangeResponse(BaseModel):
    type: Literal["range"] = "range"
    range: int


class ResultsResponse(BaseModel):
    type: Literal["results"] = "results"
    results: list[Entry] = Field(default_factory=list)


class ReloadCompleteResponse(BaseModel):
    type: Literal["reload-complete"] = "reload-complete"
    count: int


class GloballyOnResponse(BaseModel):
    type: Literal["globally-on"] = "globally-on"
    status: bool


class DialectResponse(BaseModel):
    type: Literal["dialect"] = "dialect"
    dialect: str


class DialectSetResponse(BaseModel):
    type: Literal["dialect-set"] = "dialect-set"
    dialect: str


class ErrorResponse(BaseModel):
    """Structured failure returned instead of raising across the router.

    Attributes:
        kind: Error kind ("write", "read", "load", "invalid-request")
        message: Human-readable description
    """
    type: Literal["error"] = "error"
    kind: str
    message: str


Response = Union[
    RangeResponse,
    ResultsResponse,
    ReloadCompleteResponse,
    GloballyOnResponse,
    DialectResponse,
    DialectSetResponse,
    ErrorResponse,
]
