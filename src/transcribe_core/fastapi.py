from __future__ import annotations

from typing import Protocol

from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response

from transcribe_core.errors import (
    AppError,
    ErrorCode,
    ErrorCodeBase,
    code_for_status,
    error_body,
)
from transcribe_core.logging import get_logger
from transcribe_core.request_context import elapsed_ms, format_duration, request_id_var


class _StarletteExceptionHandler(Protocol):
    async def __call__(self, request: Request, exc: Exception) -> Response: ...


class _FastAPILike(Protocol):
    """Protocol for FastAPI-like apps with add_exception_handler."""

    def add_exception_handler(
        self,
        exc_class_or_status_code: int | type[Exception],
        handler: _StarletteExceptionHandler,
    ) -> None: ...


def _json_response(
    code: ErrorCodeBase, message: str, status_code: int, headers: dict[str, str] | None = None
) -> JSONResponse:
    rid = request_id_var.get()
    body = error_body(code, message, rid if rid != "" else None, format_duration(elapsed_ms()))
    return JSONResponse(content=body, status_code=status_code, headers=headers)


def install_exception_handlers_fastapi(
    app: _FastAPILike,
    *,
    logger_name: str = "app",
    log_user_errors: bool = True,
) -> None:
    """Install centralized exception handlers on a FastAPI application.

    Registers handlers for:
    - AppError: structured application errors
    - Starlette HTTPException: framework errors such as 404 and 405
    - Exception: everything else, reported as a generic 500

    User errors (4xx) are logged at INFO without traceback. System errors
    (5xx) and unhandled exceptions are logged at ERROR with the traceback.
    Every response body carries ``success: false`` and an ``error`` string.

    Example:
        >>> app = FastAPI()
        >>> install_exception_handlers_fastapi(app, logger_name="my-api")
    """
    logger = get_logger(logger_name)

    async def _app_error_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, AppError):
            return await _unhandled_handler(request, exc)

        extra: dict[str, str] = {
            "error_code": exc.code.value,
            "error_message": exc.message,
            "path": request.url.path,
            "method": request.method,
        }
        if exc.http_status < 500:
            if log_user_errors:
                logger.info("user_error", extra=extra)
        else:
            logger.error("system_error", extra=extra, exc_info=exc)
        return _json_response(exc.code, exc.message, exc.http_status)

    async def _http_error_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, StarletteHTTPException):
            return await _unhandled_handler(request, exc)
        detail = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        headers = dict(exc.headers) if exc.headers is not None else None
        return _json_response(code_for_status(exc.status_code), detail, exc.status_code, headers)

    async def _unhandled_handler(request: Request, exc: Exception) -> Response:
        logger.error(
            "unhandled_exception",
            extra={
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "path": request.url.path,
                "method": request.method,
            },
            exc_info=exc,
        )
        # Internal details stay in the log
        return _json_response(ErrorCode.INTERNAL_ERROR, "Internal server error", 500)

    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_handler)


__all__ = ["install_exception_handlers_fastapi"]
