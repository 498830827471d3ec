"""Submit-then-poll state machine for remote transcription jobs.

A job moves Submitted -> Polling -> Completed | Failed. Each poll is a single
status read; between non-terminal reads the orchestrator sleeps an interval
that grows geometrically up to a cap. The only suspension points are the
submit call, each poll call and each backoff sleep, so a cancellation from
an enclosing deadline unwinds the loop cleanly.
"""

from __future__ import annotations

from transcribe_core.errors import AppError, TranscribeErrorCode
from transcribe_core.logging import get_logger

from . import _test_hooks
from .stt_client import ProviderError, TranscriptionJobClient
from .types import PollOutcome, PollPolicy

_logger = get_logger(__name__)

DEFAULT_POLICY: PollPolicy = {
    "max_attempts": 15,
    "initial_interval_ms": 1000,
    "multiplier": 1.5,
    "max_interval_ms": 5000,
}


class ProviderSubmissionError(AppError[TranscribeErrorCode]):
    def __init__(self, reason: str) -> None:
        super().__init__(
            TranscribeErrorCode.PROVIDER_SUBMISSION_FAILED,
            f"Failed to start transcription: {reason}",
        )
        self.reason = reason


class ProviderJobError(AppError[TranscribeErrorCode]):
    def __init__(self, reason: str) -> None:
        super().__init__(
            TranscribeErrorCode.PROVIDER_JOB_FAILED,
            f"Transcription failed: {reason}",
        )
        self.reason = reason


class PollBudgetExceededError(AppError[TranscribeErrorCode]):
    def __init__(self) -> None:
        super().__init__(
            TranscribeErrorCode.POLL_BUDGET_EXCEEDED,
            "Transcription is taking longer than expected",
        )


def next_interval(current_ms: float, policy: PollPolicy) -> float:
    return min(current_ms * policy["multiplier"], float(policy["max_interval_ms"]))


class PollingOrchestrator:
    def __init__(self, client: TranscriptionJobClient, policy: PollPolicy = DEFAULT_POLICY) -> None:
        if policy["max_attempts"] < 1:
            raise ValueError("max_attempts must be >= 1")
        self._client = client
        self._policy = policy

    @property
    def policy(self) -> PollPolicy:
        return self._policy

    async def run(self, asset_url: str) -> PollOutcome:
        try:
            job_id = await self._client.submit(asset_url)
        except ProviderError as exc:
            raise ProviderSubmissionError(exc.message) from exc
        return await self.wait(job_id)

    async def wait(self, job_id: str) -> PollOutcome:
        policy = self._policy
        max_attempts = policy["max_attempts"]
        wait_ms = float(policy["initial_interval_ms"])

        for attempt in range(1, max_attempts + 1):
            try:
                status = await self._client.poll(job_id)
            except ProviderError as exc:
                raise ProviderJobError(exc.message) from exc

            state = status["status"]
            _logger.debug(
                "transcription poll",
                extra={
                    "job_id": job_id,
                    "attempt": attempt,
                    "max_attempts": max_attempts,
                    "status": state,
                },
            )
            if state == "completed":
                text = status["text"]
                return {"job_id": job_id, "text": text or "", "attempts": attempt}
            if state == "error":
                reason = status["error"]
                raise ProviderJobError(reason if reason else "unknown error")

            # queued, processing, or anything unrecognised: keep polling
            if attempt < max_attempts:
                await _test_hooks.sleep(wait_ms / 1000.0)
                wait_ms = next_interval(wait_ms, policy)

        _logger.warning(
            "transcription poll budget exhausted",
            extra={"job_id": job_id, "max_attempts": max_attempts},
        )
        raise PollBudgetExceededError()


__all__ = [
    "DEFAULT_POLICY",
    "PollBudgetExceededError",
    "PollingOrchestrator",
    "ProviderJobError",
    "ProviderSubmissionError",
    "next_interval",
]
