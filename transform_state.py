"""Bounded rotation / scale / pan model for the displayed image."""

from __future__ import annotations

import math
from typing import Optional, Tuple

from config import ViewerSettings
from models import ImageInfo, TransformSnapshot


class TransformState:
    """Transform of the current image relative to the canvas centre.

    At ``scale == 1.0`` the drawn size depends only on the image
    orientation; odd quarter turns swap which side lies along the canvas
    x axis. Pan is clamped per axis to half of the overhang of the scaled
    image, so the image edge never moves inside the canvas.
    """

    def __init__(
        self,
        settings: Optional[ViewerSettings] = None,
        image: Optional[ImageInfo] = None,
    ) -> None:
        self._settings = settings or ViewerSettings()
        self.image = image
        self.quarter_turns = 0
        self.scale = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    @property
    def rotation(self) -> float:
        return self.quarter_turns * (math.pi / 2)

    @property
    def pan(self) -> Tuple[float, float]:
        return (self.pan_x, self.pan_y)

    def displayed_size(self) -> Tuple[float, float]:
        """Size on the canvas at scale 1.0, after rotation.

        Only the orientation matters: a landscape image is drawn at the
        canvas aspect ratio across the long axis and a portrait image at
        the same ratio stood on end. Odd quarter turns draw the image into
        the opposite canvas dimension and then swap its axes.
        """
        canvas_w = float(self._settings.canvas_width)
        canvas_h = float(self._settings.canvas_height)
        image = self.image
        if image is None:
            return canvas_w, canvas_h
        ratio = canvas_w / canvas_h
        odd = self.quarter_turns % 2 == 1
        if image.is_landscape:
            side = canvas_h if odd else canvas_w
            width, height = side, side / ratio
        else:
            side = canvas_w if odd else canvas_h
            width, height = side / ratio, side
        if odd:
            width, height = height, width
        return width, height

    def pan_bounds(self) -> Tuple[float, float]:
        displayed_w, displayed_h = self.displayed_size()
        bound_x = (displayed_w * self.scale - self._settings.canvas_width) / 2
        bound_y = (displayed_h * self.scale - self._settings.canvas_height) / 2
        return max(0.0, bound_x), max(0.0, bound_y)

    def apply_rotate(self, direction: int) -> None:
        self.quarter_turns += 1 if direction > 0 else -1
        self._reset_view()

    def apply_zoom(self, direction: int) -> None:
        factor = 1.0 + self._settings.scale_increment
        if direction > 0:
            self.scale = min(self.scale * factor, self._settings.max_scale)
        else:
            self.scale = max(self.scale / factor, 1.0)
        self._clamp_pan()

    def apply_pan(self, direction: Tuple[int, int]) -> None:
        step = self._settings.pan_increment
        dx, dy = direction
        self.pan_x += dx * self._settings.canvas_width * step
        self.pan_y += dy * self._settings.canvas_height * step
        self._clamp_pan()

    def reset_for_image_change(self, image: Optional[ImageInfo]) -> None:
        self.image = image
        self.quarter_turns = 0
        self._reset_view()

    def snapshot(self) -> TransformSnapshot:
        return TransformSnapshot(
            quarter_turns=self.quarter_turns,
            rotation=self.rotation,
            scale=self.scale,
            pan=self.pan,
        )

    def _reset_view(self) -> None:
        self.scale = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    def _clamp_pan(self) -> None:
        bound_x, bound_y = self.pan_bounds()
        self.pan_x = min(max(self.pan_x, -bound_x), bound_x)
        self.pan_y = min(max(self.pan_y, -bound_y), bound_y)
