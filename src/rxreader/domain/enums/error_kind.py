"""Closed set of outcomes a failed prescription read can end in."""

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    CONFIGURATION_FAILURE = "CONFIGURATION_FAILURE"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    INFERENCE_FAILURE = "INFERENCE_FAILURE"
    RATE_LIMITED = "RATE_LIMITED"
    PARSE_FAILURE = "PARSE_FAILURE"
    SCHEMA_VIOLATION = "SCHEMA_VIOLATION"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.CONFIGURATION_FAILURE: 500,
    ErrorKind.STORAGE_FAILURE: 500,
    ErrorKind.INFERENCE_FAILURE: 500,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.PARSE_FAILURE: 500,
    ErrorKind.SCHEMA_VIOLATION: 500,
}
