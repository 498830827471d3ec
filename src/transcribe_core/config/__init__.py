from __future__ import annotations

from ._utils import (
    LogFormat,
    LogLevel,
    _EnvError,
    _optional_env_str,
    _parse_csv,
    _parse_float,
    _parse_int,
    _parse_log_format,
    _parse_log_level,
    _parse_str,
    _require_env_str,
)

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
