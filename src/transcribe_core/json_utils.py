from __future__ import annotations

from collections.abc import Mapping, Sequence
from json import JSONDecodeError
from typing import Protocol

JSONValue = dict[str, "JSONValue"] | list["JSONValue"] | str | int | float | bool | None
JSONObject = dict[str, JSONValue]

# Broad input type for dump_json_str so TypedDicts and mixed literals serialize.
_JSONInputValue = str | int | float | bool | None | Mapping[str, object] | Sequence[object]


class InvalidJsonError(ValueError):
    """Raised when JSON parsing fails."""


class JSONTypeError(TypeError):
    """Raised when JSON value has unexpected type during narrowing."""


class _JsonLoads(Protocol):
    def __call__(self, s: str) -> JSONValue: ...


class _JsonDumps(Protocol):
    def __call__(
        self,
        obj: _JSONInputValue,
        *,
        separators: tuple[str, str] | None = ...,
        indent: int | None = ...,
    ) -> str: ...


def dump_json_str(value: _JSONInputValue, *, compact: bool = True) -> str:
    """Serialize a JSON-compatible value to a JSON string."""
    module = __import__("json")
    dumps: _JsonDumps = module.dumps
    if compact:
        return dumps(value, separators=(",", ":"), indent=None)
    return dumps(value, separators=None, indent=None)


def load_json_str(raw: str) -> JSONValue:
    module = __import__("json")
    loads: _JsonLoads = module.loads
    try:
        value = loads(raw)
    except JSONDecodeError as exc:
        raise InvalidJsonError("Invalid JSON payload") from exc
    if isinstance(value, (dict, list, str, int, float, bool)) or value is None:
        return value
    raise InvalidJsonError("Invalid JSON payload")


def load_json_bytes(raw: bytes) -> JSONValue:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidJsonError("Invalid JSON payload") from exc
    return load_json_str(text)


def load_json_dict(raw: str) -> JSONObject:
    """Parse a JSON document that must be an object."""
    value = load_json_str(raw)
    if not isinstance(value, dict):
        raise InvalidJsonError("Expected JSON object")
    return value


def require_str(obj: JSONObject, key: str) -> str:
    """Extract required string field from JSON object.

    Raises JSONTypeError if field is missing or not a string.
    """
    value = obj.get(key)
    if value is None:
        raise JSONTypeError(f"Missing required field '{key}'")
    if not isinstance(value, str):
        raise JSONTypeError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def optional_str(obj: JSONObject, key: str) -> str | None:
    """Extract optional string field from JSON object.

    Returns None if field is missing or null. Raises JSONTypeError if present
    but not a string.
    """
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise JSONTypeError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


__all__ = [
    "InvalidJsonError",
    "JSONObject",
    "JSONTypeError",
    "JSONValue",
    "dump_json_str",
    "load_json_bytes",
    "load_json_dict",
    "load_json_str",
    "optional_str",
    "require_str",
]
