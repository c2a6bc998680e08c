"""Utilities package for the bucketing engine"""

from dbcharts.utils.date_parser import TimestampParser, parse_timestamp
from dbcharts.utils.errors import (
    ErrorCode,
    ChartError,
    ConfigurationError,
    InvalidDateError,
    UnsupportedAggregationError,
    FieldLookupError,
    MalformedTimestampError,
    NonNumericValueError,
)

__all__ = [
    'TimestampParser',
    'parse_timestamp',
    'ErrorCode',
    'ChartError',
    'ConfigurationError',
    'InvalidDateError',
    'UnsupportedAggregationError',
    'FieldLookupError',
    'MalformedTimestampError',
    'NonNumericValueError',
]
