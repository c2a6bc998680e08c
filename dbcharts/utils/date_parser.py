"""
Timestamp Parsing Utility - Normalizes record timestamps for bucket matching

Record timestamps arrive in whatever shape the caller's data source produced:
datetime objects (naive or timezone-aware), plain dates, ISO-ish strings, or
POSIX epoch numbers. Every accepted value is normalized to a naive datetime
expressed in the chart's local wall-clock time, so it can be truncated with
the same format as the calendar boundaries.
"""

from datetime import datetime, date, tzinfo
from typing import Any, Union

import pytz
import structlog
from dateutil import parser as dateutil_parser

from dbcharts.utils.errors import MalformedTimestampError

logger = structlog.get_logger(__name__)

# Two defaults that differ in year, month and day; a string that parses to
# different dates against them left at least one of those parts unspecified
_SENTINEL_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 2, 2))


class TimestampParser:
    """Parse record timestamps into naive local wall-clock datetimes"""

    def __init__(self, tz: Union[str, tzinfo] = "UTC"):
        """Initialize parser with the chart's timezone"""
        self.tz = pytz.timezone(tz) if isinstance(tz, str) else tz

    def _to_local(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value
        return value.astimezone(self.tz).replace(tzinfo=None)

    def parse(self, value: Any) -> datetime:
        """
        Normalize a raw timestamp value.

        Args:
            value: datetime, date, string or epoch seconds

        Returns:
            Naive datetime in local wall-clock time

        Raises:
            MalformedTimestampError: value is missing or unreadable
        """
        if isinstance(value, datetime):
            return self._to_local(value)

        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)

        if isinstance(value, bool) or value is None:
            raise MalformedTimestampError(value, "not a date")

        if isinstance(value, (int, float)):
            try:
                return self._to_local(datetime.fromtimestamp(value, self.tz))
            except (OverflowError, OSError, ValueError) as e:
                raise MalformedTimestampError(value, str(e)) from e

        if isinstance(value, str):
            text = value.strip()
            if not text:
                raise MalformedTimestampError(value, "empty string")
            try:
                first, second = (dateutil_parser.parse(text, default=d) for d in _SENTINEL_DEFAULTS)
            except (ValueError, OverflowError) as e:
                raise MalformedTimestampError(value, str(e)) from e
            if first.date() != second.date():
                raise MalformedTimestampError(value, "incomplete date, year, month and day are required")
            return self._to_local(first)

        raise MalformedTimestampError(value, f"unsupported type {type(value).__name__}")


def parse_timestamp(value: Any, tz: Union[str, tzinfo] = "UTC") -> datetime:
    """
    Parse a single record timestamp.

    Args:
        value: Raw timestamp value
        tz: Timezone string (default: UTC)

    Returns:
        Naive datetime in local wall-clock time of ``tz``
    """
    return TimestampParser(tz).parse(value)
