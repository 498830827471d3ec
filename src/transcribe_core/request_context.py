from __future__ import annotations

import time
import uuid
from contextvars import ContextVar
from typing import Protocol

# Context variables for request tracking across async boundaries.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
request_started_var: ContextVar[float | None] = ContextVar("request_started", default=None)


class _ASGIScope(Protocol):
    """Minimal ASGI scope for HTTP requests."""

    def get(
        self, key: str, default: str | list[tuple[bytes, bytes]] | None = None
    ) -> str | list[tuple[bytes, bytes]] | None: ...


class _HeadersMutable(Protocol):
    def __setitem__(self, key: str, value: str) -> None: ...


class _RequestAdapter(Protocol):
    @property
    def scope(self) -> _ASGIScope: ...


class _ResponseAdapter(Protocol):
    @property
    def headers(self) -> _HeadersMutable: ...


class _CallNext(Protocol):
    async def __call__(self, request: _RequestAdapter) -> _ResponseAdapter: ...


class _CallNextMiddleware(Protocol):
    async def __call__(
        self, request: _RequestAdapter, call_next: _CallNext
    ) -> _ResponseAdapter: ...


class _MiddlewareDecorator(Protocol):
    def __call__(self, func: _CallNextMiddleware) -> _CallNextMiddleware: ...


class _FastAPIAppProto(Protocol):
    """Minimal FastAPI app protocol for installing middleware."""

    def middleware(self, name: str) -> _MiddlewareDecorator: ...


def install_request_id_middleware(app: _FastAPIAppProto) -> None:
    """Install request ID + start time middleware using FastAPI's decorator API."""

    decorator = app.middleware("http")

    @decorator
    async def _middleware(request: _RequestAdapter, call_next: _CallNext) -> _ResponseAdapter:
        rid = _decode_request_id(request.scope)
        rid_token = request_id_var.set(rid)
        started_token = request_started_var.set(time.monotonic())
        try:
            response = await call_next(request)
            response.headers["x-request-id"] = rid
            return response
        finally:
            request_started_var.reset(started_token)
            request_id_var.reset(rid_token)


def elapsed_ms() -> int | None:
    """Milliseconds since the current request started, or None outside a request."""
    started = request_started_var.get()
    if started is None:
        return None
    return int((time.monotonic() - started) * 1000)


def format_duration(ms: int | None) -> str | None:
    return f"{ms}ms" if ms is not None else None


def _decode_request_id(scope: _ASGIScope) -> str:
    """Extract request ID from ASGI scope headers or generate new UUID."""
    headers_raw = scope.get("headers")
    if not isinstance(headers_raw, list):
        return str(uuid.uuid4())

    for header_name_bytes, header_value_bytes in headers_raw:
        header_name = header_name_bytes.decode("latin1").lower()
        if header_name == "x-request-id":
            value = header_value_bytes.decode("latin1").strip()
            if value != "":
                return value

    return str(uuid.uuid4())


__all__ = [
    "_decode_request_id",
    "elapsed_ms",
    "format_duration",
    "install_request_id_middleware",
    "request_id_var",
    "request_started_var",
]
