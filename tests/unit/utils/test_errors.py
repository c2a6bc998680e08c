"""
Tests for Error Handling Utilities
"""

import pytest

from dbcharts.utils.errors import (
    ErrorCode,
    USER_FRIENDLY_MESSAGES,
    ChartError,
    ConfigurationError,
    FieldLookupError,
    InvalidDateError,
    MalformedTimestampError,
    NonNumericValueError,
    UnsupportedAggregationError,
    create_error_response,
    log_chart_error,
)


class TestErrorCode:
    """Test ErrorCode enum"""

    def test_error_codes_have_friendly_messages(self):
        """Test that all error codes have user-friendly messages"""
        for code in ErrorCode:
            assert code in USER_FRIENDLY_MESSAGES, f"Missing friendly message for {code}"


class TestCreateErrorResponse:
    """Test create_error_response function"""

    def test_creates_standard_format(self):
        response = create_error_response(ErrorCode.INVALID_DATE)

        assert response["error"]["code"] == "INVALID_DATE"
        assert response["error"]["message"] == USER_FRIENDLY_MESSAGES[ErrorCode.INVALID_DATE]
        assert "details" not in response["error"]

    def test_custom_message_and_details(self):
        response = create_error_response(ErrorCode.FIELD_NOT_FOUND, "boom", {"field": "x"})

        assert response["error"]["message"] == "boom"
        assert response["error"]["details"] == {"field": "x"}


class TestExceptionHierarchy:
    """Test typed exceptions"""

    @pytest.mark.parametrize(
        "error,code,bases",
        [
            (InvalidDateError("bad"), ErrorCode.INVALID_DATE, (ConfigurationError, ValueError)),
            (UnsupportedAggregationError("bad"), ErrorCode.UNSUPPORTED_AGGREGATE, (ConfigurationError,)),
            (FieldLookupError("x"), ErrorCode.FIELD_NOT_FOUND, (LookupError,)),
            (MalformedTimestampError("x"), ErrorCode.MALFORMED_TIMESTAMP, (ValueError,)),
            (NonNumericValueError("v", "n/a"), ErrorCode.NON_NUMERIC_VALUE, (ValueError,)),
        ],
    )
    def test_codes_and_bases(self, error, code, bases):
        assert isinstance(error, ChartError)
        assert isinstance(error, bases)
        assert error.code == code

    def test_to_dict(self):
        """Test exceptions render as standard error payloads"""
        payload = FieldLookupError("team", path="owner.team").to_dict()

        assert payload["error"]["code"] == "FIELD_NOT_FOUND"
        assert "owner.team" in payload["error"]["message"]
        assert payload["error"]["details"] == {"field": "team", "path": "owner.team"}

    def test_log_chart_error_does_not_raise(self):
        log_chart_error("group_by", UnsupportedAggregationError("bad", {"aggregate": "median"}))
