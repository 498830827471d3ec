from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import JobStatus


class ProviderError(Exception):
    """Provider call failed: transport error, HTTP error status or bad body."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = int(status)
        self.message = message


@runtime_checkable
class TranscriptionJobClient(Protocol):
    """Abstraction over an asynchronous speech-to-text backend (e.g., AssemblyAI).

    ``submit`` starts a job for a remotely hosted asset and returns its id.
    ``poll`` performs exactly one status read; looping and backoff belong to
    the caller.
    """

    async def submit(self, audio_url: str) -> str: ...

    async def poll(self, job_id: str) -> JobStatus: ...

    async def aclose(self) -> None: ...


__all__ = ["ProviderError", "TranscriptionJobClient"]
