from __future__ import annotations

from typing import Protocol, runtime_checkable

from transcribe_core.errors import AppError, TranscribeErrorCode

from .types import ResolvedMedia

NO_VIDEO_SOURCE = "No video source found"


@runtime_checkable
class AssetResolver(Protocol):
    """Abstraction over a short-video extraction backend (e.g., yt_dlp)."""

    async def resolve(self, url: str) -> ResolvedMedia: ...


class ResolutionError(AppError[TranscribeErrorCode]):
    def __init__(self, message: str) -> None:
        super().__init__(TranscribeErrorCode.RESOLUTION_FAILED, message)


def select_asset_url(media: ResolvedMedia) -> str:
    """Pick the first downloadable source of a resolved clip."""
    if media["kind"] != "video":
        raise ResolutionError(NO_VIDEO_SOURCE)
    sources = media["sources"]
    if not sources:
        raise ResolutionError(NO_VIDEO_SOURCE)
    url = sources[0].get("url")
    if not isinstance(url, str) or url.strip() == "":
        raise ResolutionError(NO_VIDEO_SOURCE)
    return url.strip()


async def resolve_asset_url(resolver: AssetResolver, url: str) -> str:
    """Resolve ``url`` and select its asset; every failure becomes a ResolutionError."""
    try:
        media = await resolver.resolve(url)
    except AppError:
        raise
    except Exception as exc:
        message = str(exc).strip() or NO_VIDEO_SOURCE
        raise ResolutionError(message) from exc
    return select_asset_url(media)


__all__ = [
    "NO_VIDEO_SOURCE",
    "AssetResolver",
    "ResolutionError",
    "resolve_asset_url",
    "select_asset_url",
]
