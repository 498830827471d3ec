from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import APIRouter
from starlette.requests import Request
from transcribe_core.json_utils import InvalidJsonError, JSONTypeError, load_json_bytes, optional_str
from transcribe_core.logging import get_logger
from transcribe_core.request_context import elapsed_ms, format_duration

from ..service import TranscribeService
from ..types import TranscribeResponse

_UNKNOWN_CLIENT = "unknown"


def _extract_url(raw: bytes) -> str | None:
    """Read ``url`` from a JSON object body; anything unusable reads as absent."""
    try:
        body = load_json_bytes(raw)
    except InvalidJsonError:
        return None
    if not isinstance(body, dict):
        return None
    try:
        return optional_str(body, "url")
    except JSONTypeError:
        return None


def _client_id(request: Request) -> str:
    client = request.client
    if client is None or client.host == "":
        return _UNKNOWN_CLIENT
    return client.host


def build_transcribe_handler(
    service: TranscribeService,
) -> Callable[[Request], Awaitable[TranscribeResponse]]:
    logger = get_logger(__name__)

    async def _handler(request: Request) -> TranscribeResponse:
        url = _extract_url(await request.body())
        result = await service.transcribe(_client_id(request), url)
        ms = elapsed_ms()
        logger.info(
            "transcribe request complete",
            extra={"url": url, "cached": result["cached"], "latency_ms": ms},
        )
        return {
            "success": True,
            "transcription": result["transcription"],
            "cached": result["cached"],
            "duration": format_duration(ms) or "0ms",
        }

    return _handler


def build_router(service: TranscribeService) -> APIRouter:
    router = APIRouter()
    transcribe = build_transcribe_handler(service)
    router.add_api_route("/transcribe", transcribe, methods=["POST"])
    return router


__all__ = ["build_router", "build_transcribe_handler"]
