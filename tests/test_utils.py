"""
Tests for blog_cms.utils module.

Covers:
    - utc_now(): timezone-aware UTC datetime
    - generate_id(): UUID4 string generation
    - ensure_utc(): naive/aware datetime UTC conversion
    - parse_timestamp(): ISO-8601 parsing incl. JavaScript ``Z`` suffix
    - to_iso(): serialisation
"""

from datetime import datetime, timezone, timedelta
from uuid import UUID

import pytest

from blog_cms.exceptions import ValidationError
from blog_cms.utils import ensure_utc, generate_id, parse_timestamp, to_iso, utc_now


# ===========================================================================
# utc_now()
# ===========================================================================


def test_utc_now_returns_timezone_aware_utc():
    """utc_now() must return a datetime whose tzinfo is UTC."""
    result = utc_now()
    assert result.tzinfo is not None
    assert result.tzinfo == timezone.utc


def test_utc_now_returns_current_time():
    """utc_now() must return a time within 2 seconds of datetime.now(utc)."""
    before = datetime.now(timezone.utc)
    result = utc_now()
    after = datetime.now(timezone.utc)
    assert before <= result <= after
    assert (after - before) < timedelta(seconds=2)


# ===========================================================================
# generate_id()
# ===========================================================================


def test_generate_id_returns_valid_uuid4_string():
    """generate_id() must return a string that parses as a valid UUID4."""
    result = generate_id()
    assert isinstance(result, str)
    assert UUID(result).version == 4


def test_generate_id_returns_unique_values():
    """Successive calls to generate_id() must produce distinct values."""
    ids = {generate_id() for _ in range(100)}
    assert len(ids) == 100


# ===========================================================================
# ensure_utc()
# ===========================================================================


def test_ensure_utc_naive_datetime_adds_utc():
    """A naive datetime gets UTC attached without shifting the clock."""
    result = ensure_utc(datetime(2025, 6, 15, 12, 0, 0))
    assert result.tzinfo == timezone.utc
    assert result.hour == 12


def test_ensure_utc_non_utc_aware_converts_to_utc():
    """A timezone-aware datetime in a non-UTC zone is converted to UTC."""
    plus_five = timezone(timedelta(hours=5))
    result = ensure_utc(datetime(2025, 6, 15, 17, 0, 0, tzinfo=plus_five))
    assert result.tzinfo == timezone.utc
    # 17:00 UTC+5 == 12:00 UTC
    assert result.hour == 12


# ===========================================================================
# parse_timestamp()
# ===========================================================================


class TestParseTimestamp:
    """Tests for parse_timestamp()."""

    def test_parses_javascript_iso_string_with_z(self):
        """The ``toISOString()`` format with milliseconds and Z is accepted."""
        result = parse_timestamp("2025-01-31T09:00:00.000Z")
        assert result == datetime(2025, 1, 31, 9, 0, 0, tzinfo=timezone.utc)

    def test_parses_offset_string_into_utc(self):
        """An explicit offset is converted to UTC."""
        result = parse_timestamp("2025-01-31T11:00:00+02:00")
        assert result == datetime(2025, 1, 31, 9, 0, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc

    def test_parses_plain_date_as_midnight_utc(self):
        """A date-only string means midnight UTC."""
        result = parse_timestamp("2025-01-31")
        assert result == datetime(2025, 1, 31, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "value, microsecond",
        [
            ("2025-05-01T08:00:00.12345+00:00", 123450),
            ("2025-05-01T08:00:00.1+00:00", 100000),
            ("2025-05-01T08:00:00.123456+00:00", 123456),
        ],
    )
    def test_parses_any_fraction_length(self, value, microsecond):
        """Database timestamps trim trailing zeros from the fraction."""
        result = parse_timestamp(value)
        assert result == datetime(2025, 5, 1, 8, 0, 0, microsecond, tzinfo=timezone.utc)

    def test_passes_datetimes_through_ensure_utc(self):
        """A naive datetime is treated as UTC."""
        result = parse_timestamp(datetime(2025, 1, 31, 9, 0))
        assert result.tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["", "   ", None, 12345, "not a date"])
    def test_rejects_invalid_values(self, value):
        """Empty, non-string and unparseable values raise ValidationError."""
        with pytest.raises(ValidationError, match="publishedDate"):
            parse_timestamp(value, "publishedDate")


# ===========================================================================
# to_iso()
# ===========================================================================


def test_to_iso_none_passes_through():
    """to_iso(None) returns None."""
    assert to_iso(None) is None


def test_to_iso_round_trips_through_parse_timestamp():
    """A serialised timestamp parses back to the same instant."""
    original = datetime(2025, 6, 15, 12, 30, 45, 123456, tzinfo=timezone.utc)
    assert parse_timestamp(to_iso(original)) == original
