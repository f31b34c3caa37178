"""
DevCamper API — Shared Schemas
===============================

What:  Response envelopes, pagination metadata, the error body, and the
       sanitizing base class every request body inherits from.

Envelope shapes:
    {"success": true,  "data": ...}                               DataResponse
    {"success": true,  "count": n, "data": [...]}                 ListResponse
    {"success": true,  "count": n, "pagination": {...}, "data": [...]}
    {"success": false, "error": "..."}                            ErrorResponse

Sanitization (RequestModel):
    Runs before field validation on the raw JSON body.
    1. Keys starting with "$" or containing "." are dropped at every depth,
       so operator-shaped payloads never reach a query.
    2. String values are stripped of surrounding whitespace, and "<" and ">"
       are escaped to "&lt;" / "&gt;" so stored text cannot carry markup.
       Fields named in `__unsanitized__` (passwords) are left untouched.
"""

from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

T = TypeVar("T")


def _escape_markup(value: str) -> str:
    return value.replace("<", "&lt;").replace(">", "&gt;")


def sanitize_payload(value: Any, skip: FrozenSet[str] = frozenset()) -> Any:
    """Recursively strips operator-shaped keys, trims strings and escapes markup."""
    if isinstance(value, dict):
        clean = {}
        for key, item in value.items():
            if isinstance(key, str) and (key.startswith("$") or "." in key):
                continue
            clean[key] = item if key in skip else sanitize_payload(item)
        return clean
    if isinstance(value, list):
        return [sanitize_payload(item) for item in value]
    if isinstance(value, str):
        return _escape_markup(value.strip())
    return value


class RequestModel(BaseModel):
    """Base class for request bodies: sanitized, unknown fields ignored."""

    __unsanitized__: ClassVar[FrozenSet[str]] = frozenset()

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return sanitize_payload(data, cls.__unsanitized__)
        return data


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int
    data: List[T]


class PageRef(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    """`next` is present when more rows follow; `prev` when rows precede."""

    next: Optional[PageRef] = None
    prev: Optional[PageRef] = None

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler):
        return {key: value for key, value in handler(self).items() if value is not None}


class PaginatedResponse(BaseModel):
    success: bool = True
    count: int = Field(description="Number of items in this page")
    pagination: Pagination
    data: List[Dict[str, Any]]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float
