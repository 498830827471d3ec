from __future__ import annotations

import asyncio

from transcribe_core.json_utils import JSONValue
from transcribe_core.logging import get_logger

from .. import _test_hooks
from .._test_hooks import YtDlpFactoryProto
from ..resolver import NO_VIDEO_SOURCE, AssetResolver, ResolutionError
from ..types import MediaSource, ResolvedMedia

_logger = get_logger(__name__)

_ERROR_PREFIX = "ERROR: "


def _get_yt_dlp_factory() -> YtDlpFactoryProto:
    """Get the yt-dlp factory from test hooks."""
    return _test_hooks.yt_dlp_factory


def _is_http_url(value: JSONValue) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def _has_codec(fmt: dict[str, JSONValue], key: str) -> bool:
    codec = fmt.get(key)
    # yt-dlp reports a missing stream as the literal string "none"
    return codec != "none"


def _coerce_source(fmt: dict[str, JSONValue]) -> MediaSource | None:
    url = fmt.get("url")
    if not isinstance(url, str) or not _is_http_url(url):
        return None
    source: MediaSource = {
        "url": url,
        "has_audio": _has_codec(fmt, "acodec"),
        "has_video": _has_codec(fmt, "vcodec"),
    }
    format_id = fmt.get("format_id")
    if isinstance(format_id, str):
        source["format_id"] = format_id
    ext = fmt.get("ext")
    if isinstance(ext, str):
        source["ext"] = ext
    return source


def _coerce_kind(raw: dict[str, JSONValue]) -> str:
    kind = raw.get("_type")
    if isinstance(kind, str) and kind != "":
        return kind
    return "video"


def _coerce_sources(raw: dict[str, JSONValue]) -> list[MediaSource]:
    """Downloadable sources, best first.

    The selected format's top-level URL leads; the remaining formats follow in
    yt-dlp preference order (its list is sorted worst to best), audio-bearing
    ones only unless none carry audio.
    """
    candidates: list[MediaSource] = []
    top = _coerce_source(raw)
    if top is not None:
        candidates.append(top)

    raw_formats = raw.get("formats")
    formats: list[MediaSource] = []
    if isinstance(raw_formats, list):
        for item in reversed(raw_formats):
            if isinstance(item, dict):
                source = _coerce_source(item)
                if source is not None:
                    formats.append(source)
    with_audio = [s for s in formats if s.get("has_audio", False)]
    candidates.extend(with_audio if with_audio else formats)

    seen: set[str] = set()
    out: list[MediaSource] = []
    for source in candidates:
        if source["url"] in seen:
            continue
        seen.add(source["url"])
        out.append(source)
    return out


def _clean_message(exc: Exception) -> str:
    message = str(exc).strip()
    if message.startswith(_ERROR_PREFIX):
        message = message[len(_ERROR_PREFIX) :].strip()
    return message


def _yt_extract(url: str) -> ResolvedMedia:
    ydl_factory = _get_yt_dlp_factory()
    opts_data: dict[str, JSONValue] = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
        "cachedir": False,
    }
    with ydl_factory(opts_data) as ydl:
        info_raw = ydl.extract_info(url, download=False)
    empty: dict[str, JSONValue] = {}
    info = info_raw if isinstance(info_raw, dict) else empty
    return {"kind": _coerce_kind(info), "sources": _coerce_sources(info)}


class YtDlpResolver(AssetResolver):
    """Resolver over yt_dlp; extraction runs in a worker thread."""

    async def resolve(self, url: str) -> ResolvedMedia:
        try:
            media = await asyncio.to_thread(_yt_extract, url)
        except Exception as exc:
            _logger.info(
                "yt_dlp extraction failed",
                extra={"url": url, "error_type": type(exc).__name__},
            )
            raise ResolutionError(_clean_message(exc) or NO_VIDEO_SOURCE) from exc
        _logger.debug(
            "yt_dlp extraction complete",
            extra={"url": url, "status": media["kind"]},
        )
        return media


__all__ = ["YtDlpResolver"]
