"""Maps transcribed utterances onto viewer commands."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from models import Command, Hypothesis

DEFAULT_PHRASES: dict[str, Command] = {
    "next": Command.NEXT,
    "previous": Command.PREVIOUS,
    "zoom in": Command.ZOOM_IN,
    "zoom out": Command.ZOOM_OUT,
    "rotate left": Command.ROTATE_LEFT,
    "rotate right": Command.ROTATE_RIGHT,
    "move left": Command.PAN_LEFT,
    "move right": Command.PAN_RIGHT,
    "move up": Command.PAN_UP,
    "move down": Command.PAN_DOWN,
}


class PhraseMatcher:
    def __init__(self, phrases: Optional[Mapping[str, Command]] = None) -> None:
        table = DEFAULT_PHRASES if phrases is None else phrases
        # Longest phrase first so a specific phrase wins over one it contains.
        self._phrases = sorted(
            ((phrase.casefold(), command) for phrase, command in table.items()),
            key=lambda item: len(item[0]),
            reverse=True,
        )

    def match_utterance(self, utterance: str) -> Optional[Command]:
        text = " ".join(utterance.casefold().split())
        for phrase, command in self._phrases:
            if phrase in text:
                return command
        return None

    def match(self, hypotheses: Sequence[Hypothesis]) -> Optional[Command]:
        """First hypothesis (in service rank order) that names a command wins."""
        for hypothesis in hypotheses:
            command = self.match_utterance(hypothesis.utterance)
            if command is not None:
                return command
        return None
