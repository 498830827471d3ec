from __future__ import annotations

import pytest
from transcribe_core.errors import TranscribeErrorCode

from tests.support.fakes import FakeJobClient, RecordingSleep, status
from tiktok_transcribe import _test_hooks
from tiktok_transcribe.poller import (
    DEFAULT_POLICY,
    PollBudgetExceededError,
    PollingOrchestrator,
    ProviderJobError,
    ProviderSubmissionError,
    next_interval,
)
from tiktok_transcribe.stt_client import ProviderError
from tiktok_transcribe.types import PollPolicy


@pytest.fixture
def sleeps() -> RecordingSleep:
    rec = RecordingSleep()
    _test_hooks.sleep = rec
    return rec


@pytest.mark.asyncio
async def test_processing_then_completed_polls_n_plus_one(sleeps: RecordingSleep) -> None:
    n = 4
    client = FakeJobClient([status("processing")] * n + [status("completed", text="hi there")])
    outcome = await PollingOrchestrator(client).run("https://cdn/a.mp4")
    assert outcome == {"job_id": "job-1", "text": "hi there", "attempts": n + 1}
    assert client.polls == n + 1
    assert client.submitted == ["https://cdn/a.mp4"]
    assert len(sleeps.delays) == n


@pytest.mark.asyncio
async def test_backoff_grows_and_caps(sleeps: RecordingSleep) -> None:
    client = FakeJobClient([status("queued")] * 6 + [status("completed", text="x")])
    await PollingOrchestrator(client).run("u")
    assert sleeps.delays == [1.0, 1.5, 2.25, 3.375, 5.0, 5.0]


@pytest.mark.asyncio
async def test_never_completes_stops_at_ceiling(sleeps: RecordingSleep) -> None:
    client = FakeJobClient([status("processing")])
    with pytest.raises(PollBudgetExceededError) as exc_info:
        await PollingOrchestrator(client).run("u")
    assert client.polls == DEFAULT_POLICY["max_attempts"]
    # No sleep after the final attempt
    assert len(sleeps.delays) == DEFAULT_POLICY["max_attempts"] - 1
    err = exc_info.value
    assert err.code == TranscribeErrorCode.POLL_BUDGET_EXCEEDED
    assert err.message == "Transcription is taking longer than expected"
    assert err.http_status == 500


@pytest.mark.asyncio
async def test_provider_error_status_fails(sleeps: RecordingSleep) -> None:
    client = FakeJobClient([status("processing"), status("error", error="audio too short")])
    with pytest.raises(ProviderJobError) as exc_info:
        await PollingOrchestrator(client).run("u")
    assert exc_info.value.message == "Transcription failed: audio too short"
    assert exc_info.value.code == TranscribeErrorCode.PROVIDER_JOB_FAILED
    assert client.polls == 2


@pytest.mark.asyncio
async def test_submission_failure(sleeps: RecordingSleep) -> None:
    client = FakeJobClient(submit_error=ProviderError(400, "invalid audio_url"))
    with pytest.raises(ProviderSubmissionError) as exc_info:
        await PollingOrchestrator(client).run("u")
    assert exc_info.value.message == "Failed to start transcription: invalid audio_url"
    assert client.polls == 0


@pytest.mark.asyncio
async def test_poll_transport_failure_is_job_failure(sleeps: RecordingSleep) -> None:
    client = FakeJobClient([ProviderError(503, "HTTP 503")])
    with pytest.raises(ProviderJobError) as exc_info:
        await PollingOrchestrator(client).run("u")
    assert exc_info.value.message == "Transcription failed: HTTP 503"


@pytest.mark.asyncio
async def test_completed_without_text_is_empty(sleeps: RecordingSleep) -> None:
    client = FakeJobClient([status("completed", text=None)])
    outcome = await PollingOrchestrator(client).run("u")
    assert outcome["text"] == ""
    assert sleeps.delays == []


@pytest.mark.asyncio
async def test_unknown_status_keeps_polling(sleeps: RecordingSleep) -> None:
    client = FakeJobClient([status("uploading"), status("completed", text="ok")])
    outcome = await PollingOrchestrator(client).run("u")
    assert outcome["attempts"] == 2


def test_next_interval() -> None:
    policy: PollPolicy = {
        "max_attempts": 3,
        "initial_interval_ms": 100,
        "multiplier": 2.0,
        "max_interval_ms": 300,
    }
    assert next_interval(100, policy) == 200
    assert next_interval(200, policy) == 300


def test_rejects_empty_budget() -> None:
    policy: PollPolicy = {
        "max_attempts": 0,
        "initial_interval_ms": 100,
        "multiplier": 2.0,
        "max_interval_ms": 300,
    }
    with pytest.raises(ValueError):
        PollingOrchestrator(FakeJobClient(), policy)
