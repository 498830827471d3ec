from __future__ import annotations

from types import TracebackType
from typing import Literal, Protocol

from transcribe_core.json_utils import JSONValue
from typing_extensions import TypedDict

# Kind reported by the resolver; only "video" carries playable sources.
MediaKind = str


class _MediaSourceRequired(TypedDict):
    url: str


class MediaSource(_MediaSourceRequired, total=False):
    """One downloadable candidate for a resolved clip (e.g. a quality tier)."""

    format_id: str
    ext: str
    has_audio: bool
    has_video: bool


class ResolvedMedia(TypedDict):
    kind: MediaKind
    sources: list[MediaSource]


class JobStatus(TypedDict):
    """Single status read of a remote transcription job."""

    id: str
    status: str
    text: str | None
    error: str | None


class PollPolicy(TypedDict):
    max_attempts: int
    initial_interval_ms: int
    multiplier: float
    max_interval_ms: int


class PollOutcome(TypedDict):
    job_id: str
    text: str
    attempts: int


class TranscribeResult(TypedDict):
    transcription: str
    cached: bool


class TranscribeResponse(TypedDict):
    success: Literal[True]
    transcription: str
    cached: bool
    duration: str


class _TracebackProto(Protocol):
    """Protocol for traceback objects in __exit__."""

    @property
    def tb_lineno(self) -> int: ...


class YtDlpProto(Protocol):
    """Minimal protocol for yt-dlp YoutubeDL objects."""

    def __enter__(self) -> YtDlpProto: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: _TracebackProto | TracebackType | None,
    ) -> None: ...

    def extract_info(self, url: str, download: bool) -> dict[str, JSONValue]: ...


__all__ = [
    "JobStatus",
    "MediaKind",
    "MediaSource",
    "PollOutcome",
    "PollPolicy",
    "ResolvedMedia",
    "TranscribeResponse",
    "TranscribeResult",
    "YtDlpProto",
    "_TracebackProto",
]
