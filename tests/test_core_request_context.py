from __future__ import annotations

import uuid

import pytest
from transcribe_core.http_client import add_correlation_header, build_async_client
from transcribe_core.json_utils import (
    InvalidJsonError,
    JSONTypeError,
    dump_json_str,
    load_json_bytes,
    load_json_dict,
    optional_str,
    require_str,
)
from transcribe_core.request_context import (
    _decode_request_id,
    elapsed_ms,
    format_duration,
    request_started_var,
)


def test_decode_request_id_prefers_header() -> None:
    scope = {"headers": [(b"x-request-id", b" abc ")]}
    assert _decode_request_id(scope) == "abc"


def test_decode_request_id_generates_uuid() -> None:
    rid = _decode_request_id({"headers": [(b"x-request-id", b"  ")]})
    assert str(uuid.UUID(rid)) == rid
    rid2 = _decode_request_id({})
    assert str(uuid.UUID(rid2)) == rid2


def test_elapsed_and_duration() -> None:
    assert elapsed_ms() is None
    assert format_duration(None) is None
    assert format_duration(42) == "42ms"
    token = request_started_var.set(0.0)
    try:
        ms = elapsed_ms()
    finally:
        request_started_var.reset(token)
    assert ms is not None and ms >= 0


def test_correlation_header() -> None:
    assert add_correlation_header({"A": "1"}, "rid") == {"A": "1", "X-Request-ID": "rid"}
    assert add_correlation_header(None, "") == {}


@pytest.mark.asyncio
async def test_build_async_client() -> None:
    client = build_async_client(5.0)
    await client.aclose()


def test_json_utils() -> None:
    assert dump_json_str({"a": [1, True]}) == '{"a":[1,true]}'
    assert load_json_bytes(b'{"url": "x"}') == {"url": "x"}
    with pytest.raises(InvalidJsonError):
        load_json_bytes(b"\xff")
    with pytest.raises(InvalidJsonError):
        load_json_dict("[1]")
    obj = load_json_dict('{"s": "v", "n": 1}')
    assert require_str(obj, "s") == "v"
    assert optional_str(obj, "missing") is None
    with pytest.raises(JSONTypeError):
        require_str(obj, "n")
    with pytest.raises(JSONTypeError):
        optional_str(obj, "n")
    with pytest.raises(JSONTypeError):
        require_str(obj, "missing")
