from __future__ import annotations

from collections.abc import Mapping
from types import ModuleType
from typing import Protocol

from transcribe_core.json_utils import JSONValue


class HttpxResponse(Protocol):
    status_code: int
    text: str
    headers: Mapping[str, str]


class Timeout(Protocol):
    def __repr__(self) -> str: ...


class _TimeoutCtor(Protocol):
    def __call__(self, timeout: float) -> Timeout: ...


class AsyncTransport(Protocol):
    async def aclose(self) -> None: ...


class HttpxAsyncClient(Protocol):
    async def aclose(self) -> None: ...

    async def post(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        json: JSONValue | None = None,
    ) -> HttpxResponse: ...

    async def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
    ) -> HttpxResponse: ...


class _AsyncClientCtor(Protocol):
    def __call__(
        self,
        *,
        timeout: Timeout,
        transport: AsyncTransport | None = None,
    ) -> HttpxAsyncClient: ...


def _load_httpx() -> tuple[_TimeoutCtor, _AsyncClientCtor]:
    mod: ModuleType = __import__("httpx")
    timeout_ctor: _TimeoutCtor = object.__getattribute__(mod, "Timeout")
    async_ctor: _AsyncClientCtor = object.__getattribute__(mod, "AsyncClient")
    return timeout_ctor, async_ctor


def build_async_client(
    timeout_seconds: float, transport: AsyncTransport | None = None
) -> HttpxAsyncClient:
    timeout_ctor, async_ctor = _load_httpx()
    timeout_obj = timeout_ctor(float(timeout_seconds))
    if transport is None:
        return async_ctor(timeout=timeout_obj)
    return async_ctor(timeout=timeout_obj, transport=transport)


def add_correlation_header(
    headers: Mapping[str, str] | None,
    request_id: str,
    *,
    header_name: str = "X-Request-ID",
) -> dict[str, str]:
    """Return a copy of headers with the correlation header set.

    An empty request_id (outside a request) leaves the headers unchanged.
    """
    base: dict[str, str] = dict(headers or {})
    if request_id != "":
        base[header_name] = request_id
    return base


__all__ = [
    "AsyncTransport",
    "HttpxAsyncClient",
    "HttpxResponse",
    "Timeout",
    "add_correlation_header",
    "build_async_client",
]
