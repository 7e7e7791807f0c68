from __future__ import annotations

import math

from models import TransformSnapshot, ViewerSnapshot
from overlay import format_status


def test_format_status_shows_counter_and_transform() -> None:
    snapshot = ViewerSnapshot(
        transform=TransformSnapshot(
            quarter_turns=-1, rotation=-math.pi / 2, scale=1.5625, pan=(45.0, -30.0)
        ),
        activated=True,
        image_index=1,
        image_count=7,
    )

    text = format_status(snapshot)

    assert text.startswith("Image 2/7")
    assert "rot -90°" in text
    assert "zoom 1.56x" in text
    assert "pan (45, -30)" in text
