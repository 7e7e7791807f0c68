"""Routes keyboard, gesture and speech events into the command dispatcher."""

from __future__ import annotations

import logging
import threading
from queue import Empty, Queue
from typing import Callable, Mapping, Optional

from debounce import InteractionSession
from dispatcher import CommandDispatcher
from errors import SpeechError
from models import (
    Command,
    GestureEvent,
    InputEvent,
    InputMode,
    KeyEvent,
    SpeechOutcome,
    SpeechResult,
    ViewerSnapshot,
)
from session_controller import SpeechSessionController

LOG = logging.getLogger("slideshow.input")

DEFAULT_KEY_BINDINGS: dict[str, Command] = {
    "n": Command.NEXT,
    "p": Command.PREVIOUS,
    "r": Command.ROTATE_RIGHT,
    "l": Command.ROTATE_LEFT,
    "j": Command.ZOOM_IN,
    "k": Command.ZOOM_OUT,
    "a": Command.PAN_LEFT,
    "d": Command.PAN_RIGHT,
    "w": Command.PAN_UP,
    "s": Command.PAN_DOWN,
}

TRIGGER_KEY = "key"
TRIGGER_GESTURE = "gesture"

OutcomeCallback = Callable[[SpeechOutcome], None]


class InputArbiter:
    """Single entry point for every input modality.

    All methods except the speech worker run on the control thread, which
    is the only thread that touches the dispatcher or the interaction
    session. With ``async_speech`` the encode/transcribe chain runs on a
    worker and its result comes back as a ``SpeechResult`` drained by
    ``tick()``.
    """

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        session: InteractionSession,
        speech: Optional[SpeechSessionController] = None,
        mode: InputMode = InputMode.KEYBOARD,
        trigger_key: str = "0",
        key_bindings: Optional[Mapping[str, Command]] = None,
        async_speech: bool = False,
        on_speech_outcome: Optional[OutcomeCallback] = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._session = session
        self._speech = speech
        self.mode = mode
        self._trigger_key = trigger_key.casefold()
        bindings = DEFAULT_KEY_BINDINGS if key_bindings is None else key_bindings
        self._bindings = {key.casefold(): command for key, command in bindings.items()}
        self._async_speech = async_speech
        self._on_speech_outcome = on_speech_outcome

        self._triggers: set[str] = set()
        self._speech_live = False
        self._results: Queue[SpeechResult] = Queue()
        self._worker: Optional[threading.Thread] = None
        self.last_speech_outcome: Optional[SpeechOutcome] = None

    @property
    def activated(self) -> bool:
        return self._session.activated

    def handle(self, event: InputEvent) -> bool:
        """Process one input event; return True if it changed the view."""
        if isinstance(event, KeyEvent):
            return self._handle_key(event)
        if isinstance(event, GestureEvent):
            return self._handle_gesture(event)
        if isinstance(event, SpeechResult):
            return self._apply_outcome(event.outcome, event.captured_while_activated)
        raise TypeError(f"unsupported input event: {event!r}")

    def tick(self) -> int:
        """Drain finished speech results; returns how many were applied."""
        applied = 0
        while True:
            try:
                result = self._results.get_nowait()
            except Empty:
                return applied
            if self.handle(result):
                applied += 1

    def wait_for_speech(self, timeout: Optional[float] = None) -> None:
        worker = self._worker
        if worker is not None:
            worker.join(timeout)

    def snapshot(self) -> ViewerSnapshot:
        outcome = self.last_speech_outcome
        return ViewerSnapshot(
            transform=self._dispatcher.snapshot(),
            activated=self._session.activated,
            image_index=self._dispatcher.image_index,
            image_count=self._dispatcher.image_count,
            last_speech_code=outcome.code if outcome else "",
        )

    def shutdown(self) -> None:
        self._triggers.clear()
        self._session.activated = False
        if self._speech is not None and self._speech_live:
            self._speech.cancel_session("app quit")
        self._speech_live = False

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _handle_key(self, event: KeyEvent) -> bool:
        key = event.key.casefold()
        if key == self._trigger_key:
            if event.pressed:
                return self._assert_trigger(TRIGGER_KEY)
            return self._release_trigger(TRIGGER_KEY)
        if not event.pressed:
            return False
        command = self._bindings.get(key)
        if command is None:
            return False
        return self._dispatcher.dispatch(command)

    def _handle_gesture(self, event: GestureEvent) -> bool:
        if not self.mode.uses_gesture:
            LOG.debug("gesture signal ignored in %s mode", self.mode.value)
            return False
        if event.active:
            return self._assert_trigger(TRIGGER_GESTURE)
        return self._release_trigger(TRIGGER_GESTURE)

    def _assert_trigger(self, source: str) -> bool:
        if source in self._triggers:
            return False
        first = not self._triggers
        self._triggers.add(source)
        if first:
            self._session.activated = True
            LOG.info("input activated by %s", source)
            if self._speech is not None and self.mode.uses_speech:
                self._start_speech(self._speech)
        return False

    def _release_trigger(self, source: str) -> bool:
        if source not in self._triggers:
            return False
        self._triggers.discard(source)
        if self._triggers:
            return False

        applied = False
        if self._speech_live and self._speech is not None:
            self._speech_live = False
            if self._async_speech:
                self._worker = threading.Thread(
                    target=self._finish_speech, args=(self._speech,), daemon=True
                )
                self._worker.start()
            else:
                outcome = self._speech.stop_session()
                if outcome is not None:
                    applied = self._apply_outcome(outcome, True)
        self._session.activated = False
        LOG.info("input deactivated")
        return applied

    def _start_speech(self, speech: SpeechSessionController) -> None:
        try:
            speech.start_session()
        except SpeechError as exc:
            LOG.warning("speech channel unavailable: %s", exc.message)
            self._record_outcome(SpeechOutcome(code=exc.code, message=exc.message))
            return
        self._speech_live = True

    def _finish_speech(self, speech: SpeechSessionController) -> None:
        outcome = speech.stop_session()
        if outcome is not None:
            self._results.put(SpeechResult(outcome=outcome, captured_while_activated=True))

    def _apply_outcome(self, outcome: SpeechOutcome, captured_while_activated: bool) -> bool:
        self._record_outcome(outcome)
        if outcome.command is None:
            return False
        # Results captured outside the trigger are gated on the live session.
        activated = True if captured_while_activated else None
        return self._dispatcher.dispatch(outcome.command, activated=activated)

    def _record_outcome(self, outcome: SpeechOutcome) -> None:
        self.last_speech_outcome = outcome
        if self._on_speech_outcome:
            self._on_speech_outcome(outcome)
