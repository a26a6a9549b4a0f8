"""
Shared utility functions used throughout the blog CMS codebase.

Provides:
    - utc_now(): Timezone-aware UTC datetime (for Supabase TIMESTAMPTZ columns)
    - generate_id(): UUID4 string generator (for post and user identifiers)
    - ensure_utc(dt): Convert any datetime to timezone-aware UTC
    - parse_timestamp(value): Parse ISO-8601 strings / datetimes into aware UTC
    - to_iso(dt): Serialise an aware datetime for JSON documents and rows
"""

from datetime import datetime, timezone
import uuid
from typing import Any, Optional

from dateutil.parser import isoparse

from blog_cms.exceptions import ValidationError


# ===========================================================================
# TIMEZONE UTILITIES
# All timestamps stored in Supabase must be timezone-aware (TIMESTAMPTZ)
# ===========================================================================


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    ALWAYS use this instead of ``datetime.now()`` or ``datetime.utcnow()``
    so that comparisons against stored publish dates never mix naive and
    aware values.

    Returns:
        Timezone-aware datetime in UTC.
    """
    return datetime.now(timezone.utc)


def generate_id() -> str:
    """
    Generate a unique, opaque ID for post and user records.

    Returns:
        A unique UUID4 string.
    """
    return str(uuid.uuid4())


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware in UTC.

    Args:
        dt: Datetime to convert (naive or aware).

    Returns:
        Timezone-aware datetime in UTC.
    """
    if dt.tzinfo is None:
        # Assume naive datetime is UTC
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# ===========================================================================
# SERIALISATION
# ===========================================================================


def parse_timestamp(value: Any, name: str = "timestamp") -> datetime:
    """
    Parse a timestamp coming from a JSON document, a database row or a request.

    Accepts aware/naive ``datetime`` objects and ISO-8601 strings, including
    the ``Z`` suffix JavaScript clients send (``2025-01-31T09:00:00.000Z``),
    plain dates (``2025-01-31``) and database timestamps with any number of
    fractional digits (``2025-05-01T08:00:00.12345+00:00``).

    Args:
        value: The value to parse.
        name: Field name used in error messages.

    Returns:
        Timezone-aware datetime in UTC.

    Raises:
        ValidationError: If *value* is empty or not a parseable timestamp.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be an ISO-8601 timestamp, got {value!r}")

    try:
        parsed = isoparse(value.strip())
    except (ValueError, OverflowError) as exc:
        raise ValidationError(f"{name} is not a valid timestamp: {value!r}") from exc
    return ensure_utc(parsed)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Serialise a datetime to an ISO-8601 UTC string (``None`` passes through).
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()
