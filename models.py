"""Core data models for the viewer input core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from errors import NO_MATCH, OK


class Command(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    PAN_LEFT = "pan_left"
    PAN_RIGHT = "pan_right"
    PAN_UP = "pan_up"
    PAN_DOWN = "pan_down"

    @property
    def is_discrete(self) -> bool:
        return self in DISCRETE_COMMANDS


DISCRETE_COMMANDS = frozenset(
    {Command.NEXT, Command.PREVIOUS, Command.ROTATE_LEFT, Command.ROTATE_RIGHT}
)


class InputMode(str, Enum):
    KEYBOARD = "keyboard"
    GESTURE = "gesture"
    SPEECH = "speech"
    GESTURE_AND_SPEECH = "gesture_and_speech"

    @property
    def uses_speech(self) -> bool:
        return self in (InputMode.SPEECH, InputMode.GESTURE_AND_SPEECH)

    @property
    def uses_gesture(self) -> bool:
        return self in (InputMode.GESTURE, InputMode.GESTURE_AND_SPEECH)


class CaptureState(str, Enum):
    IDLE = "IDLE"
    CAPTURING = "CAPTURING"
    STOPPED = "STOPPED"


class SessionState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    ENCODING = "ENCODING"
    TRANSCRIBING = "TRANSCRIBING"
    MATCHING = "MATCHING"
    ERROR = "ERROR"


@dataclass
class AudioFrame:
    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1
    timestamp_ms: int = 0


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    label: str = ""
    # Position in the catalog; assigned when the catalog is loaded.
    index: int = 0

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height


@dataclass(frozen=True)
class Hypothesis:
    utterance: str
    # The service only scores some hypotheses (usually the best one).
    confidence: Optional[float] = None


@dataclass
class TranscriptionResult:
    language_code: str
    status: int = -1
    id: Optional[str] = None
    hypotheses: List[Hypothesis] = field(default_factory=list)


@dataclass
class SpeechOutcome:
    command: Optional[Command] = None
    code: str = OK
    message: str = ""
    hypotheses: List[Hypothesis] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.code not in (OK, NO_MATCH)


@dataclass(frozen=True)
class TransformSnapshot:
    quarter_turns: int
    rotation: float
    scale: float
    pan: Tuple[float, float]


@dataclass(frozen=True)
class ViewerSnapshot:
    transform: TransformSnapshot
    activated: bool
    image_index: int
    image_count: int
    last_speech_code: str = ""


@dataclass(frozen=True)
class KeyEvent:
    key: str
    pressed: bool


@dataclass(frozen=True)
class GestureEvent:
    active: bool


@dataclass(frozen=True)
class SpeechResult:
    outcome: SpeechOutcome
    # Set by the capture path for utterances recorded while the trigger was held.
    captured_while_activated: bool = False


InputEvent = Union[KeyEvent, GestureEvent, SpeechResult]
