"""Protocol interfaces used by the speech session."""

from __future__ import annotations

from queue import Queue
from typing import Optional, Protocol, Sequence

from models import AudioFrame, Command, Hypothesis, TranscriptionResult


class Recorder(Protocol):
    def start(self, audio_queue: Queue[AudioFrame | None]) -> None: ...

    def stop(self) -> None: ...


class Encoder(Protocol):
    def encode(self, pcm: bytes, sample_rate: int = 16000) -> bytes: ...


class Transcriber(Protocol):
    def transcribe(self, payload: bytes, language_code: str) -> TranscriptionResult: ...


class CommandMatcher(Protocol):
    def match(self, hypotheses: Sequence[Hypothesis]) -> Optional[Command]: ...

