"""Error taxonomy raised by the measure lifecycle and mapped at the HTTP boundary."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    INVALID_DATA = "INVALID_DATA"
    INVALID_TYPE = "INVALID_TYPE"
    DOUBLE_REPORT = "DOUBLE_REPORT"
    CONFIRMATION_DUPLICATE = "CONFIRMATION_DUPLICATE"
    MEASURE_NOT_FOUND = "MEASURE_NOT_FOUND"
    MEASURES_NOT_FOUND = "MEASURES_NOT_FOUND"
    DATASTORE_ERROR = "DATASTORE_ERROR"
    RECOGNITION_ERROR = "RECOGNITION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MeasureError(Exception):
    """Base class for business and infrastructure failures with an error code."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, description: Optional[str] = None) -> None:
        self.description = description
        super().__init__(description or self.error_code.value)


class InvalidData(MeasureError):
    """Raised when a request field is missing or malformed."""

    error_code = ErrorCode.INVALID_DATA


class InvalidType(MeasureError):
    """Raised when listing with an unknown measure type."""

    error_code = ErrorCode.INVALID_TYPE


class DoubleReport(MeasureError):
    """Raised when a reading already exists for the customer, type and month."""

    error_code = ErrorCode.DOUBLE_REPORT


class ConfirmationDuplicate(MeasureError):
    error_code = ErrorCode.CONFIRMATION_DUPLICATE


class MeasureNotFound(MeasureError):
    error_code = ErrorCode.MEASURE_NOT_FOUND


class MeasuresNotFound(MeasureError):
    error_code = ErrorCode.MEASURES_NOT_FOUND


class DatastoreError(MeasureError):
    """Raised when the measures table cannot be read or written."""

    error_code = ErrorCode.DATASTORE_ERROR


class RecognitionError(MeasureError):
    """Raised when the recognition provider fails to answer."""

    error_code = ErrorCode.RECOGNITION_ERROR
