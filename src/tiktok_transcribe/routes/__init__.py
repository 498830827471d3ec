"""Transcription API routes.

Endpoints:
    Health:
        GET  /health         - Liveness check (always returns ok)
        GET  /healthz        - Liveness check (always returns ok)
        GET  /readyz         - Readiness check (cache sweeper running)

    Transcription:
        POST /transcribe     - Transcribe the audio of a TikTok video URL
"""

from __future__ import annotations

from .health import build_router as build_health_router
from .transcribe import build_router as build_transcribe_router

__all__ = [
    "build_health_router",
    "build_transcribe_router",
]
