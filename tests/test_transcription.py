"""Tests for TranscriptionClient and response parsing."""

from __future__ import annotations

import json

import httpx
import pytest

from errors import (
    ASR_PROTOCOL_ERROR,
    NETWORK_ERROR,
    REASON_MALFORMED,
    REASON_NETWORK,
    REASON_REJECTED,
    SERVICE_REJECTED,
    TranscriptionError,
)
from transcription import CONTENT_TYPE, TranscriptionClient, parse_response

ENDPOINT = "https://asr.example.test/recognize"

GOOD_BODY = json.dumps(
    {
        "status": 0,
        "id": "a1b2c3-1",
        "hypotheses": [
            {"utterance": "next picture", "confidence": 0.87},
            {"utterance": "next pictures"},
        ],
    }
)


def _client(handler) -> TranscriptionClient:  # noqa: ANN001
    return TranscriptionClient(
        endpoint=ENDPOINT,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


# ---------------------------------------------------------------
# parse_response
# ---------------------------------------------------------------

def test_parse_good_response() -> None:
    result = parse_response(GOOD_BODY, "en-US")

    assert result.status == 0
    assert result.id == "a1b2c3-1"
    assert result.language_code == "en-US"
    assert [h.utterance for h in result.hypotheses] == ["next picture", "next pictures"]
    assert result.hypotheses[0].confidence == pytest.approx(0.87)
    assert result.hypotheses[1].confidence is None


def test_parse_missing_hypotheses_is_empty() -> None:
    result = parse_response('{"status": 0, "id": "x"}', "de-DE")
    assert result.hypotheses == []


@pytest.mark.parametrize(
    "body",
    [
        "",
        "not json",
        "[]",
        '{"id": "x", "hypotheses": []}',
        '{"status": "0", "hypotheses": []}',
        '{"status": true}',
        '{"status": 0, "id": 5}',
        '{"status": 0, "hypotheses": {}}',
        '{"status": 0, "hypotheses": ["next"]}',
        '{"status": 0, "hypotheses": [{"confidence": 0.5}]}',
        '{"status": 0, "hypotheses": [{"utterance": "a", "confidence": "high"}]}',
        '{"status": 0, "hypotheses": [{"utterance": "a", "confidence": 1.5}]}',
    ],
)
def test_parse_malformed_bodies(body: str) -> None:
    with pytest.raises(TranscriptionError) as info:
        parse_response(body, "en-US")
    assert info.value.reason == REASON_MALFORMED
    assert info.value.code == ASR_PROTOCOL_ERROR


def test_parse_non_zero_status_is_rejected() -> None:
    with pytest.raises(TranscriptionError) as info:
        parse_response('{"status": 5, "id": "x", "hypotheses": []}', "en-US")
    assert info.value.reason == REASON_REJECTED
    assert info.value.code == SERVICE_REJECTED


# ---------------------------------------------------------------
# TranscriptionClient
# ---------------------------------------------------------------

def test_request_wire_format() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=GOOD_BODY)

    result = _client(handler).transcribe(b"fLaC-data", "en-US")

    request = seen[0]
    assert request.method == "POST"
    assert request.url.host == "asr.example.test"
    assert request.url.params["lang"] == "en-US"
    assert request.url.params["maxresults"] == "6"
    assert request.headers["Content-Type"] == CONTENT_TYPE
    assert request.content == b"fLaC-data"
    assert result.hypotheses[0].utterance == "next picture"


def test_connection_error_maps_to_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TranscriptionError) as info:
        _client(handler).transcribe(b"x", "en-US")
    assert info.value.reason == REASON_NETWORK
    assert info.value.code == NETWORK_ERROR


def test_timeout_maps_to_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TranscriptionError) as info:
        _client(handler).transcribe(b"x", "en-US")
    assert info.value.reason == REASON_NETWORK


def test_http_error_status_maps_to_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(TranscriptionError) as info:
        _client(handler).transcribe(b"x", "en-US")
    assert info.value.reason == REASON_NETWORK


def test_garbage_body_maps_to_malformed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(TranscriptionError) as info:
        _client(handler).transcribe(b"x", "en-US")
    assert info.value.reason == REASON_MALFORMED


def test_one_attempt_per_utterance() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(500)

    with pytest.raises(TranscriptionError):
        _client(handler).transcribe(b"x", "en-US")
    assert calls == 1
