from __future__ import annotations

from .startup import make_app_from_env

app = make_app_from_env()

__all__ = ["app"]
