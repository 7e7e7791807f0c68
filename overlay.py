"""Status bar window: image counter, transform and activation indicator."""

from __future__ import annotations

import math

from models import ViewerSnapshot

try:
    from PySide6.QtCore import Qt, QTimer
    from PySide6.QtWidgets import QApplication, QLabel, QWidget, QVBoxLayout
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QTimer = None  # type: ignore
    QApplication = None  # type: ignore
    QLabel = object  # type: ignore
    QWidget = object  # type: ignore
    QVBoxLayout = object  # type: ignore

_ACTIVE_STYLE = (
    "color: black; font-size: 18px; padding: 6px 20px;"
    "background: rgb(0,255,0);"
)
_IDLE_STYLE = (
    "color: white; font-size: 18px; padding: 6px 20px;"
    "background: black;"
)


def format_status(snapshot: ViewerSnapshot) -> str:
    transform = snapshot.transform
    degrees = int(round(math.degrees(transform.rotation)))
    pan_x, pan_y = transform.pan
    return (
        f"Image {snapshot.image_index + 1}/{snapshot.image_count}"
        f"   rot {degrees}°   zoom {transform.scale:.2f}x"
        f"   pan ({pan_x:.0f}, {pan_y:.0f})"
    )


class StatusBarWindow(QWidget):
    def __init__(self, width: int = 900) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowFlags(
            Qt.WindowStaysOnTopHint | Qt.FramelessWindowHint | Qt.Tool
        )
        self.setFixedWidth(width)

        self._label = QLabel("")
        self._label.setStyleSheet(_IDLE_STYLE)
        self._message = QLabel("")
        self._message.setStyleSheet("color: #FF6B6B; font-size: 14px; padding: 2px 20px;")
        self._message.hide()

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self._label)
        layout.addWidget(self._message)
        self.setLayout(layout)

        self._message_timer: QTimer | None = None
        self._last_text = ""
        self._last_active: bool | None = None

    def _center_bottom(self) -> None:
        if QApplication is None:
            return
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geom = screen.availableGeometry()
        self.adjustSize()
        x = geom.x() + (geom.width() - self.width()) // 2
        y = geom.y() + geom.height() - self.height() - 40
        self.move(x, y)

    def update_snapshot(self, snapshot: ViewerSnapshot) -> None:
        """Repaint only when the text or the indicator changed."""
        text = format_status(snapshot)
        if text != self._last_text:
            self._label.setText(text)
            self._last_text = text
        if snapshot.activated != self._last_active:
            self._label.setStyleSheet(_ACTIVE_STYLE if snapshot.activated else _IDLE_STYLE)
            self._last_active = snapshot.activated
        if not self.isVisible():
            self._center_bottom()
            self.show()

    def show_message(self, text: str, hide_after_ms: int = 2000) -> None:
        self._cancel_message_timer()
        self._message.setText(text)
        self._message.show()
        self.adjustSize()
        if QTimer is not None:
            self._message_timer = QTimer()
            self._message_timer.setSingleShot(True)
            self._message_timer.timeout.connect(self._message.hide)
            self._message_timer.start(hide_after_ms)

    def _cancel_message_timer(self) -> None:
        if self._message_timer is not None:
            self._message_timer.stop()
            self._message_timer = None
