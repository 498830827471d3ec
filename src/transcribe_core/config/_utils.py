from __future__ import annotations

from typing import Literal

from . import _test_hooks

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "text"]


class _EnvError(RuntimeError):
    pass


def _optional_env_str(key: str) -> str | None:
    value = _test_hooks.get_env(key)
    if value is None:
        return None
    trimmed = value.strip()
    if trimmed == "":
        return None
    return trimmed


def _require_env_str(key: str) -> str:
    value = _test_hooks.get_env(key)
    if value is None:
        raise _EnvError(f"Missing required env var: {key}")
    trimmed = value.strip()
    if trimmed == "":
        raise _EnvError(f"Empty env var: {key}")
    return trimmed


def _parse_str(key: str, default: str) -> str:
    val = _optional_env_str(key)
    return val if val is not None else default


def _parse_int(key: str, default: int) -> int:
    val = _optional_env_str(key)
    if val is None:
        return default
    return int(val)


def _parse_float(key: str, default: float) -> float:
    val = _optional_env_str(key)
    if val is None:
        return default
    return float(val)


def _parse_csv(key: str, default: list[str]) -> list[str]:
    val = _optional_env_str(key)
    if val is None:
        return list(default)
    parts = [p.strip() for p in val.split(",") if p.strip() != ""]
    return parts if parts else list(default)


def _parse_log_level(key: str, default: LogLevel) -> LogLevel:
    val = _optional_env_str(key)
    if val is None:
        return default
    upper_val = val.upper()
    if upper_val == "DEBUG":
        return "DEBUG"
    if upper_val == "INFO":
        return "INFO"
    if upper_val == "WARNING":
        return "WARNING"
    if upper_val == "ERROR":
        return "ERROR"
    if upper_val == "CRITICAL":
        return "CRITICAL"
    return default


def _parse_log_format(key: str, default: LogFormat) -> LogFormat:
    val = _optional_env_str(key)
    if val is None:
        return default
    lowered = val.lower()
    if lowered == "json":
        return "json"
    if lowered == "text":
        return "text"
    return default


__all__ = [
    "LogFormat",
    "LogLevel",
    "_EnvError",
    "_optional_env_str",
    "_parse_csv",
    "_parse_float",
    "_parse_int",
    "_parse_log_format",
    "_parse_log_level",
    "_parse_str",
    "_require_env_str",
]
