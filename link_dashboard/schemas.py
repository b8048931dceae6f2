"""
Data model for the Link Dashboard.

Responsibilities:
    - Describe the Link and AccessLogEntry snapshots returned by the services
    - Normalize service payloads once, at ingestion, into explicit optionals
    - Validate link-creation input before it is sent to the link service

Normalization rules (applied by `field_validator(mode="before")`):
    - Nullable wrappers such as {"Time": "...", "Valid": true} or
      {"Int32": 5, "Valid": false} collapse to their value or None.
    - Malformed or negative `click_limit` / `user_id` become None.
    - Malformed or negative `click_count` becomes 0.
    - Unparseable optional timestamps become None.
    - Naive timestamps are read as UTC.

All models are frozen: the dashboard reads snapshots, it never mutates them.

LLM Prompt Example:
    "Show how to normalize a loosely-typed JSON payload into strict pydantic
    models once at the boundary, so downstream code never re-checks shapes."
"""

from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

__all__ = ["Link", "AccessLogEntry", "ResolvedAccessLog", "CreateLinkRequest"]


def _unwrap_nullable(value: Any, key: str) -> Any:
    """Collapse a {"<key>": value, "Valid": bool} wrapper to value or None."""
    if isinstance(value, dict) and "Valid" in value:
        return value.get(key) if value.get("Valid") else None
    return value


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Read a naive datetime as UTC; aware values pass through unchanged."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _optional_count(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


class Link(BaseModel):
    """A short link as held by the link-storage service."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    slug: str
    target_url: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    click_limit: Optional[int] = None
    click_count: int = 0
    deleted_at: Optional[datetime] = None
    user_id: Optional[int] = None

    @field_validator("expires_at", "deleted_at", mode="wrap")
    @classmethod
    def _optional_timestamp(cls, value, handler):
        value = _unwrap_nullable(value, "Time")
        if value is None or value == "":
            return None
        try:
            return as_utc(handler(value))
        except ValidationError:
            return None

    @field_validator("created_at", mode="after")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("click_limit", "user_id", mode="before")
    @classmethod
    def _optional_int(cls, value: Any) -> Optional[int]:
        return _optional_count(_unwrap_nullable(value, "Int32"))

    @field_validator("click_count", mode="before")
    @classmethod
    def _click_count(cls, value: Any) -> int:
        return _optional_count(value) or 0


class AccessLogEntry(BaseModel):
    """One recorded visit of a short link, keyed by the link's numeric id."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    link_id: int
    accessed_at: datetime
    ip_address: str = ""
    user_agent: str = ""
    # display-only enrichment, present when the log service resolved it
    referer: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    device_type: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None

    @field_validator("accessed_at", mode="after")
    @classmethod
    def _accessed_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class ResolvedAccessLog(AccessLogEntry):
    """An access-log entry joined with the slug of the link it refers to."""

    link_slug: str


class CreateLinkRequest(BaseModel):
    """
    Validated payload for creating a link.

    Raises:
        pydantic.ValidationError (a ValueError): on a malformed URL, a
        non-positive click limit or an unparseable expiry.
    """

    target_url: str
    expires_at: Optional[datetime] = None
    click_limit: Optional[int] = Field(default=None, gt=0)

    @field_validator("target_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("Invalid URL format")
        return value

    @field_validator("expires_at", mode="before")
    @classmethod
    def _complete_form_value(cls, value: Any) -> Any:
        # datetime-local inputs post "YYYY-MM-DDTHH:MM"; the service wants RFC 3339
        if value == "":
            return None
        if isinstance(value, str) and len(value) == 16:
            return value + ":00Z"
        return value

    @field_validator("expires_at", mode="after")
    @classmethod
    def _expires_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    def payload(self) -> dict:
        """JSON body for the link service, omitting unset optionals."""
        return self.model_dump(mode="json", exclude_none=True)
