from __future__ import annotations

from collections.abc import Mapping

import httpx
from transcribe_core.http_client import HttpxAsyncClient, HttpxResponse, add_correlation_header
from transcribe_core.json_utils import (
    InvalidJsonError,
    JSONObject,
    JSONTypeError,
    JSONValue,
    load_json_dict,
    load_json_str,
    require_str,
)
from transcribe_core.logging import get_logger
from transcribe_core.request_context import request_id_var

from .. import _test_hooks
from ..stt_client import ProviderError, TranscriptionJobClient
from ..types import JobStatus

_logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.assemblyai.com/v2"


class AssemblyAIClient(TranscriptionJobClient):
    """AssemblyAI transcript API over an injected async HTTP client."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        client: HttpxAsyncClient | None = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._api_key = api_key.strip()
        self._client: HttpxAsyncClient = (
            _test_hooks.http_client_factory(float(timeout_seconds)) if client is None else client
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit(self, audio_url: str) -> str:
        url = f"{self._base}/transcript"
        body: JSONObject = {
            "audio_url": audio_url,
            "speed_boost": True,
            "language_detection": True,
        }
        try:
            resp = await self._client.post(url, headers=self._headers(), json=body)
        except httpx.HTTPError as exc:
            raise ProviderError(0, _transport_message(exc)) from exc
        if resp.status_code >= 400:
            raise ProviderError(int(resp.status_code), _extract_message(resp))
        payload = _load_json_dict(resp.text)
        err = payload.get("error")
        if isinstance(err, str) and err.strip() != "":
            raise ProviderError(int(resp.status_code), err)
        job_id = _require_str_field(payload, "id")
        _logger.info("assemblyai job submitted", extra={"job_id": job_id})
        return job_id

    async def poll(self, job_id: str) -> JobStatus:
        url = f"{self._base}/transcript/{job_id}"
        try:
            resp = await self._client.get(url, headers=self._headers())
        except httpx.HTTPError as exc:
            raise ProviderError(0, _transport_message(exc)) from exc
        if resp.status_code >= 400:
            raise ProviderError(int(resp.status_code), _extract_message(resp))
        payload = _load_json_dict(resp.text)
        return _parse_status_response(payload, job_id)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/json",
            "authorization": self._api_key,
        }
        return add_correlation_header(headers, request_id_var.get())


def _transport_message(exc: httpx.HTTPError) -> str:
    detail = str(exc).strip()
    return detail if detail != "" else type(exc).__name__


def _load_json_dict(raw_text: str) -> JSONObject:
    try:
        return load_json_dict(raw_text)
    except InvalidJsonError as exc:
        raise ProviderError(500, "Invalid response body") from exc


def _require_str_field(obj: JSONObject, field: str) -> str:
    try:
        value = require_str(obj, field)
    except JSONTypeError as exc:
        raise ProviderError(500, "Invalid response body") from exc
    if value == "":
        raise ProviderError(500, "Invalid response body")
    return value


def _optional_str_field(obj: Mapping[str, JSONValue], field: str) -> str | None:
    value = obj.get(field)
    return value if isinstance(value, str) else None


def _parse_status_response(obj: JSONObject, job_id: str) -> JobStatus:
    status = _require_str_field(obj, "status")
    returned_id = _optional_str_field(obj, "id")
    return {
        "id": returned_id if returned_id is not None else job_id,
        "status": status,
        "text": _optional_str_field(obj, "text"),
        "error": _optional_str_field(obj, "error"),
    }


def _extract_message(resp: HttpxResponse) -> str:
    text = resp.text
    try:
        parsed = load_json_str(text)
    except InvalidJsonError:
        _logger.debug("assemblyai_client: response body not JSON; falling back to HTTP status")
        return f"HTTP {int(resp.status_code)}"
    if isinstance(parsed, dict):
        msg_val = parsed.get("error") or parsed.get("message") or parsed.get("detail")
        if isinstance(msg_val, str) and msg_val.strip() != "":
            return msg_val
    return f"HTTP {int(resp.status_code)}"


__all__ = ["DEFAULT_BASE_URL", "AssemblyAIClient"]
