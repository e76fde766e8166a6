"""Timezone helpers.

SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
columns, so everything read from the database goes through :func:`as_utc`
before it is compared with :func:`utcnow`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from ..errors import BadRequestError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def parse_datetime(value: Any, field: str) -> Optional[datetime]:
    """Parse an ISO-8601 request value into an aware UTC datetime."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str):
        raise BadRequestError(f"Please provide a valid date for {field}")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise BadRequestError(f"Please provide a valid date for {field}") from exc
    return as_utc(parsed)


def time_ago(value: datetime, now: Optional[datetime] = None) -> str:
    """Human readable age used by the admin activity feed."""

    now = now or utcnow()
    hours = int((now - as_utc(value)).total_seconds() // 3600)
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours} hours ago"
    days = hours // 24
    if days < 7:
        return f"{days} days ago"
    return f"{days // 7} weeks ago"
