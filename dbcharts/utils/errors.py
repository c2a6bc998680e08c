"""
Centralized Error Handling Utilities

Provides the typed exception hierarchy raised by the bucketing engine and a
consistent error payload format for applications that surface these errors.
"""

from typing import Optional, Dict, Any
from enum import Enum
import structlog

logger = structlog.get_logger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for consistent error payloads"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

    # Calendar errors
    INVALID_DATE = "INVALID_DATE"

    # Aggregation errors
    UNSUPPORTED_AGGREGATE = "UNSUPPORTED_AGGREGATE"

    # Record errors
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    MALFORMED_TIMESTAMP = "MALFORMED_TIMESTAMP"
    NON_NUMERIC_VALUE = "NON_NUMERIC_VALUE"


# User-friendly error messages (do not expose record contents)
USER_FRIENDLY_MESSAGES = {
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred while building the chart.",
    ErrorCode.INVALID_CONFIGURATION: "The chart configuration is invalid. Please check your settings.",
    ErrorCode.INVALID_DATE: "The requested calendar date does not exist.",
    ErrorCode.UNSUPPORTED_AGGREGATE: "The requested aggregation is not supported.",
    ErrorCode.FIELD_NOT_FOUND: "A field required to build the chart is missing from the data.",
    ErrorCode.MALFORMED_TIMESTAMP: "A record has a date that could not be read.",
    ErrorCode.NON_NUMERIC_VALUE: "A record has a value that could not be aggregated.",
}


def create_error_response(
    code: ErrorCode,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        code: Error code enum
        message: Optional custom message (defaults to user-friendly message)
        details: Optional additional details

    Returns:
        Standardized error response dict
    """
    return {
        "error": {
            "code": code.value,
            "message": message or USER_FRIENDLY_MESSAGES.get(code, USER_FRIENDLY_MESSAGES[ErrorCode.INTERNAL_ERROR]),
            **({"details": details} if details else {}),
        }
    }


class ChartError(Exception):
    """Base class for every error raised by the bucketing engine"""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Error payload in the standard response format"""
        return create_error_response(self.code, self.message, self.details)


class ConfigurationError(ChartError):
    """Invalid chart settings or bucketing arguments"""

    code = ErrorCode.INVALID_CONFIGURATION


class InvalidDateError(ConfigurationError, ValueError):
    """A day/month/year combination that does not exist on the calendar"""

    code = ErrorCode.INVALID_DATE


class UnsupportedAggregationError(ConfigurationError):
    """Unknown aggregate operation"""

    code = ErrorCode.UNSUPPORTED_AGGREGATE


class FieldLookupError(ChartError, LookupError):
    """A record does not expose the requested field"""

    code = ErrorCode.FIELD_NOT_FOUND

    def __init__(self, field: str, record: Any = None, path: Optional[str] = None):
        message = f"Field '{field}' not found on record"
        if path:
            message = f"Field '{field}' not found while resolving '{path}'"
        super().__init__(message, {"field": field, **({"path": path} if path else {})})
        self.field = field
        self.record = record


class MalformedTimestampError(ChartError, ValueError):
    """A record timestamp that cannot be parsed"""

    code = ErrorCode.MALFORMED_TIMESTAMP

    def __init__(self, value: Any, reason: Optional[str] = None):
        message = f"Cannot parse timestamp {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, {"value": repr(value)})
        self.value = value
        self.reason = reason


class NonNumericValueError(ChartError, ValueError):
    """A record value that cannot take part in an aggregate"""

    code = ErrorCode.NON_NUMERIC_VALUE

    def __init__(self, field: str, value: Any):
        super().__init__(
            f"Field '{field}' holds a non-numeric value",
            {"field": field, "value": repr(value)}
        )
        self.field = field
        self.value = value


def log_chart_error(operation: str, error: ChartError) -> None:
    """
    Log a chart error with its code and details before it propagates.

    Args:
        operation: Operation that failed (e.g., "group_by_day")
        error: The error being raised
    """
    logger.error(
        f"Chart error during {operation}",
        code=error.code.value,
        error=error.message,
        **error.details
    )
