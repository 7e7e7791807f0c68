"""HTTP client for the remote speech recognition service.

The encoded utterance is posted as the raw request body; the service answers
with a single JSON object::

    {"id": "...", "status": 0,
     "hypotheses": [{"utterance": "next picture", "confidence": 0.91}, ...]}

A non-zero ``status`` means the service could not process the audio.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from config import DEFAULT_ENDPOINT
from errors import REASON_MALFORMED, REASON_NETWORK, REASON_REJECTED, TranscriptionError
from models import Hypothesis, TranscriptionResult

HTTP_LOG = logging.getLogger("slideshow.http")

CONTENT_TYPE = "audio/x-flac; rate=16000"
MAX_RESULTS = 6
STATUS_OK = 0


def _malformed(detail: str) -> TranscriptionError:
    return TranscriptionError(REASON_MALFORMED, f"malformed response: {detail}")


def _parse_hypothesis(item: Any) -> Hypothesis:
    if not isinstance(item, dict):
        raise _malformed("hypothesis is not an object")
    utterance = item.get("utterance")
    if not isinstance(utterance, str):
        raise _malformed("hypothesis.utterance is not a string")
    confidence = item.get("confidence")
    if confidence is None:
        return Hypothesis(utterance=utterance)
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise _malformed("hypothesis.confidence is not a number")
    if not 0.0 <= confidence <= 1.0:
        raise _malformed(f"hypothesis.confidence out of range: {confidence}")
    return Hypothesis(utterance=utterance, confidence=float(confidence))


def parse_response(body: str, language_code: str) -> TranscriptionResult:
    """Schema-check a response body; raise ``TranscriptionError`` on failure."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, TypeError) as exc:
        raise _malformed(str(exc)) from exc
    if not isinstance(payload, dict):
        raise _malformed("top level is not an object")

    status = payload.get("status")
    if isinstance(status, bool) or not isinstance(status, int):
        raise _malformed("status is not an integer")
    response_id = payload.get("id")
    if response_id is not None and not isinstance(response_id, str):
        raise _malformed("id is not a string")
    raw_hypotheses = payload.get("hypotheses", [])
    if not isinstance(raw_hypotheses, list):
        raise _malformed("hypotheses is not an array")

    result = TranscriptionResult(
        language_code=language_code,
        status=status,
        id=response_id,
        hypotheses=[_parse_hypothesis(item) for item in raw_hypotheses],
    )
    if result.status != STATUS_OK:
        raise TranscriptionError(REASON_REJECTED, f"service status {result.status}")
    return result


class TranscriptionClient:
    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_s: float = 10.0,
        max_results: int = MAX_RESULTS,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._endpoint = endpoint
        self._max_results = max_results
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout_s))

    def transcribe(self, payload: bytes, language_code: str) -> TranscriptionResult:
        """POST one utterance; no retries."""
        params = {"lang": language_code, "maxresults": self._max_results}
        HTTP_LOG.info("POST %s lang=%s bytes=%d", self._endpoint, language_code, len(payload))
        try:
            response = self._client.post(
                self._endpoint,
                params=params,
                content=payload,
                headers={"Content-Type": CONTENT_TYPE},
            )
            response.raise_for_status()
            body = response.text
        except httpx.HTTPError as exc:
            HTTP_LOG.error("transcription request failed: %s", exc)
            raise TranscriptionError(REASON_NETWORK, str(exc)) from exc
        return parse_response(body, language_code)

    def close(self) -> None:
        self._client.close()
