"""State-machine based speech session orchestration.

One session runs capture -> encode -> transcribe -> match strictly in
order. ``stop_session`` blocks the calling thread until the whole chain has
finished and always leaves the controller back in ``IDLE``.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from capture import AudioCaptureSession
from config import LANG_EN_US
from errors import (
    ASR_PROTOCOL_ERROR,
    NO_MATCH,
    OK,
    SessionBusyError,
    SpeechError,
)
from interfaces import CommandMatcher, Encoder, Recorder, Transcriber
from models import SessionState, SpeechOutcome
from phrases import PhraseMatcher

LOG = logging.getLogger("slideshow.speech")

StateCallback = Callable[[SessionState, SessionState], None]
ErrorCallback = Callable[[str, str], None]


class SpeechSessionController:
    def __init__(
        self,
        recorder: Recorder,
        encoder: Encoder,
        transcriber: Transcriber,
        matcher: Optional[CommandMatcher] = None,
        language_code: str = LANG_EN_US,
        on_state_change: Optional[StateCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._recorder = recorder
        self._encoder = encoder
        self._transcriber = transcriber
        self._matcher = matcher or PhraseMatcher()
        self.language_code = language_code
        self._on_state_change = on_state_change
        self._on_error = on_error

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._session_id = 0
        self._capture: Optional[AudioCaptureSession] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state != SessionState.IDLE

    def start_session(self) -> None:
        """Open the microphone; raises ``SpeechError`` if that is not possible."""
        with self._lock:
            if self._state != SessionState.IDLE:
                raise SessionBusyError(f"speech session is {self._state.value}")
            capture = AudioCaptureSession(self._recorder)
            try:
                capture.start()
            except SpeechError as exc:
                capture.close()
                LOG.warning("speech capture unavailable: %s", exc.message)
                self._emit_error(exc.code, exc.message)
                raise
            self._session_id += 1
            self._capture = capture
            self._transition(SessionState.RECORDING)

    def stop_session(self) -> Optional[SpeechOutcome]:
        """Finish the live session; returns None if nothing was recording."""
        with self._lock:
            capture = self._capture
            if self._state != SessionState.RECORDING or capture is None:
                return None
            self._transition(SessionState.ENCODING)
            session_id = self._session_id

        try:
            outcome = self._run_pipeline(capture)
        except SpeechError as exc:
            outcome = self._fail(exc.code, exc.message)
        except Exception as exc:  # pragma: no cover
            LOG.exception("speech session %d crashed", session_id)
            outcome = self._fail(ASR_PROTOCOL_ERROR, str(exc))
        finally:
            capture.close()
            with self._lock:
                self._capture = None
                self._transition(SessionState.IDLE)

        LOG.info(
            "speech session %d finished: %s %s",
            session_id,
            outcome.code,
            outcome.command.value if outcome.command else "-",
        )
        return outcome

    def cancel_session(self, reason: str) -> None:
        with self._lock:
            if self._state == SessionState.IDLE:
                return
            if self._state != SessionState.RECORDING:
                LOG.info("cannot cancel speech session while %s", self._state.value)
                return
            if self._capture is not None:
                self._capture.close()
                self._capture = None
            LOG.info("speech session cancelled: %s", reason)
            self._transition(SessionState.IDLE)

    def _run_pipeline(self, capture: AudioCaptureSession) -> SpeechOutcome:
        pcm = capture.stop()
        if not pcm:
            return SpeechOutcome(code=NO_MATCH, message="no audio captured")

        payload = self._encoder.encode(pcm, capture.sample_rate)

        with self._lock:
            self._transition(SessionState.TRANSCRIBING)
        result = self._transcriber.transcribe(payload, self.language_code)

        with self._lock:
            self._transition(SessionState.MATCHING)
        command = self._matcher.match(result.hypotheses)
        if command is None:
            return SpeechOutcome(code=NO_MATCH, hypotheses=result.hypotheses)
        return SpeechOutcome(command=command, code=OK, hypotheses=result.hypotheses)

    def _fail(self, code: str, message: str) -> SpeechOutcome:
        with self._lock:
            self._transition(SessionState.ERROR)
        LOG.warning("speech pipeline failed: %s %s", code, message)
        self._emit_error(code, message)
        return SpeechOutcome(code=code, message=message)

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _transition(self, to_state: SessionState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
