"""Applies canonical commands to the transform state through the gate."""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import Callable, Optional, Sequence

from config import ViewerSettings
from debounce import DebounceGate, InteractionSession
from models import Command, ImageInfo, TransformSnapshot
from transform_state import TransformState

LOG = logging.getLogger("slideshow.input")

Clock = Callable[[], float]

_PAN_DIRECTIONS = {
    Command.PAN_LEFT: (1, 0),
    Command.PAN_RIGHT: (-1, 0),
    Command.PAN_UP: (0, 1),
    Command.PAN_DOWN: (0, -1),
}


class CommandDispatcher:
    def __init__(
        self,
        session: InteractionSession,
        settings: Optional[ViewerSettings] = None,
        images: Sequence[ImageInfo] = (),
        clock: Clock = time.monotonic,
        on_image_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._settings = settings or ViewerSettings()
        self._clock = clock
        self._on_image_change = on_image_change
        self.gate = DebounceGate(session, self._settings.min_action_interval_s)
        self.transform = TransformState(self._settings)
        self._images: list[ImageInfo] = []
        self.image_index = 0
        self.set_images(images)

    @property
    def image_count(self) -> int:
        return len(self._images)

    @property
    def current_image(self) -> Optional[ImageInfo]:
        if not self._images:
            return None
        return self._images[self.image_index]

    def set_images(self, images: Sequence[ImageInfo], index: int = 0) -> None:
        self._images = [dataclasses.replace(image, index=i) for i, image in enumerate(images)]
        self.image_index = min(max(index, 0), max(len(self._images) - 1, 0))
        self.transform.reset_for_image_change(self.current_image)

    def dispatch(
        self,
        command: Command,
        now: Optional[float] = None,
        activated: Optional[bool] = None,
    ) -> bool:
        """Apply ``command`` if the gate admits it; return whether it was applied."""
        if now is None:
            now = self._clock()
        if not self.gate.admit(command, now, activated):
            return False

        if command is Command.NEXT:
            self._show_image(self.image_index + 1)
        elif command is Command.PREVIOUS:
            self._show_image(self.image_index - 1)
        elif command is Command.ROTATE_RIGHT:
            self.transform.apply_rotate(+1)
        elif command is Command.ROTATE_LEFT:
            self.transform.apply_rotate(-1)
        elif command is Command.ZOOM_IN:
            self.transform.apply_zoom(+1)
        elif command is Command.ZOOM_OUT:
            self.transform.apply_zoom(-1)
        else:
            self.transform.apply_pan(_PAN_DIRECTIONS[command])
        LOG.debug("applied %s", command.value)
        return True

    def snapshot(self) -> TransformSnapshot:
        return self.transform.snapshot()

    def _show_image(self, index: int) -> None:
        if not self._images:
            return
        self.image_index = min(max(index, 0), len(self._images) - 1)
        self.transform.reset_for_image_change(self.current_image)
        if self._on_image_change:
            self._on_image_change(self.image_index)
