from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar


class ErrorCodeBase(str, Enum):
    """Base class for service error codes.

    Each member is both an Enum and a str, so it serializes as its value.
    """

    value: str


class ErrorCode(ErrorCodeBase):
    """Standard platform error codes.

    Convention: UPPERCASE_WITH_UNDERSCORES, one precise code per condition.
    """

    # User/Client Errors (4xx)
    INVALID_INPUT = "INVALID_INPUT"  # 400 - validation failed
    NOT_FOUND = "NOT_FOUND"  # 404 - route or resource not found
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"  # 405 - wrong HTTP method
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"  # 429 - too many requests

    # System Errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"  # 500 - unexpected server error
    CONFIG_ERROR = "CONFIG_ERROR"  # 500 - configuration missing/invalid


class TranscribeErrorCode(ErrorCodeBase):
    """Precise transcription service error codes."""

    TIKTOK_URL_REQUIRED = "TIKTOK_URL_REQUIRED"
    RESOLUTION_FAILED = "RESOLUTION_FAILED"
    PROVIDER_SUBMISSION_FAILED = "PROVIDER_SUBMISSION_FAILED"
    PROVIDER_JOB_FAILED = "PROVIDER_JOB_FAILED"
    POLL_BUDGET_EXCEEDED = "POLL_BUDGET_EXCEEDED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"


ErrorCodeType = TypeVar("ErrorCodeType", bound=ErrorCodeBase)


class AppError(Exception, Generic[ErrorCodeType]):
    """Application error with a structured code and HTTP status.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        http_status: HTTP status code to return

    Example:
        >>> raise AppError(
        ...     code=TranscribeErrorCode.TIKTOK_URL_REQUIRED,
        ...     message="Missing TikTok URL in request body",
        ... )
    """

    def __init__(self, code: ErrorCodeType, message: str, http_status: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status if http_status is not None else _default_status_for(code)


_ERROR_CODE_STATUS: dict[ErrorCodeBase, int] = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.RATE_LIMIT_EXCEEDED: 429,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.CONFIG_ERROR: 500,
    TranscribeErrorCode.TIKTOK_URL_REQUIRED: 400,
    TranscribeErrorCode.RESOLUTION_FAILED: 500,
    TranscribeErrorCode.PROVIDER_SUBMISSION_FAILED: 500,
    TranscribeErrorCode.PROVIDER_JOB_FAILED: 500,
    TranscribeErrorCode.POLL_BUDGET_EXCEEDED: 500,
    TranscribeErrorCode.DEADLINE_EXCEEDED: 504,
}


def _default_status_for(code: ErrorCodeBase) -> int:
    """Map error codes to default HTTP status codes."""
    return _ERROR_CODE_STATUS.get(code, 500)


def _code_value(code: ErrorCodeBase) -> str:
    """Return the plain string value ("INVALID_INPUT", not "ErrorCode.INVALID_INPUT")."""
    result: str = code.value
    return result


def code_for_status(status: int) -> ErrorCode:
    """Pick a platform code for framework-raised HTTP errors (404, 405, ...)."""
    if status == 404:
        return ErrorCode.NOT_FOUND
    if status == 405:
        return ErrorCode.METHOD_NOT_ALLOWED
    if status == 429:
        return ErrorCode.RATE_LIMIT_EXCEEDED
    if 400 <= status < 500:
        return ErrorCode.INVALID_INPUT
    return ErrorCode.INTERNAL_ERROR


ErrorBody = dict[str, str | bool | None]


def error_body(
    code: ErrorCodeBase, message: str, request_id: str | None, duration: str | None
) -> ErrorBody:
    """Standard failure payload: a stable ``success`` discriminant plus details."""
    return {
        "success": False,
        "error": message,
        "code": _code_value(code),
        "request_id": request_id,
        "duration": duration,
    }


__all__ = [
    "AppError",
    "ErrorBody",
    "ErrorCode",
    "ErrorCodeBase",
    "TranscribeErrorCode",
    "code_for_status",
    "error_body",
]
