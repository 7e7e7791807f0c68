"""Application entrypoint."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from arbiter import InputArbiter
from config import JsonConfigStore, ViewerSettings
from debounce import InteractionSession
from dispatcher import CommandDispatcher
from encoder import FlacEncoder
from errors import ERROR_MESSAGES, NO_MATCH
from hotkey import GlobalKeyboardAdapter
from models import ImageInfo, InputMode, KeyEvent, SessionState, SpeechOutcome
from overlay import StatusBarWindow
from recorder import SoundDeviceRecorder
from session_controller import SpeechSessionController
from transcription import TranscriptionClient

try:
    from PySide6.QtCore import QObject, QSize, QTimer, Signal
    from PySide6.QtGui import QAction, QBrush, QColor, QIcon, QImageReader, QPainter, QPixmap
    from PySide6.QtWidgets import QApplication, QFileDialog, QMenu, QSystemTrayIcon
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

LOG = logging.getLogger("slideshow")

IMAGE_SUFFIXES = (".png", ".jpg")
TICK_MS = 30


def _create_icon(color: str = "#888888", size: int = 22) -> QIcon:
    """Generate a simple circular tray icon with the given color."""
    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


ICON_IDLE = "#888888"      # grey
ICON_ACTIVE = "#00CC44"    # green
ICON_LISTENING = "#FF4444"  # red


def load_catalog(image_dir: Path) -> list[ImageInfo]:
    """Read pixel sizes of the images in ``image_dir`` without decoding them."""
    if not image_dir.is_dir():
        return []
    images = []
    for path in sorted(image_dir.iterdir()):
        if path.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        size = QImageReader(str(path)).size()
        if size.isValid():
            images.append(
                ImageInfo(width=size.width(), height=size.height(), label=path.name, index=len(images))
            )
    return images


class UIBridge(QObject):
    key_signal = Signal(str, bool)
    error_signal = Signal(str)
    state_signal = Signal(str, str)  # from_state, to_state


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store = JsonConfigStore()
        self.settings = ViewerSettings()
        self.status_bar = StatusBarWindow(width=self.settings.canvas_width)
        self.ui = UIBridge()
        self.ui.key_signal.connect(self._on_key_ui)
        self.ui.error_signal.connect(self._on_error_ui)
        self.ui.state_signal.connect(self._on_state_change_ui)

        try:
            mode = InputMode(self.config_store.get_input_mode())
        except ValueError:
            mode = InputMode.KEYBOARD

        self.session = InteractionSession()
        self.dispatcher = CommandDispatcher(
            self.session,
            self.settings,
            images=load_catalog(self.config_store.get_image_dir()),
        )
        timeout_s = self.config_store.get_request_timeout_s()
        self.speech = SpeechSessionController(
            recorder=SoundDeviceRecorder(),
            encoder=FlacEncoder(flac_path=self.config_store.get_flac_path(), timeout_s=timeout_s),
            transcriber=TranscriptionClient(
                endpoint=self.config_store.get_asr_endpoint(), timeout_s=timeout_s
            ),
            language_code=self.config_store.get_language_code(),
            on_state_change=self._on_state_change,
            on_error=self._on_error,
        )
        trigger_key = self.config_store.get_trigger_key()
        self.arbiter = InputArbiter(
            self.dispatcher,
            self.session,
            speech=self.speech,
            mode=mode,
            trigger_key=trigger_key,
            async_speech=self.config_store.get_async_speech(),
            on_speech_outcome=self._on_speech_outcome,
        )
        self.keyboard = GlobalKeyboardAdapter(suppress_repeat=(trigger_key,))

        self.timer = QTimer()
        self.timer.timeout.connect(self._on_tick)

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self.tray.setToolTip(f"MMI Slideshow ({mode.value})")
        self._setup_menu()
        self.tray.show()

    def _setup_menu(self) -> None:
        menu = QMenu()

        dir_action = QAction("Choose Image Folder", menu)
        dir_action.triggered.connect(self._choose_image_dir)
        menu.addAction(dir_action)

        menu.addSeparator()
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self.quit)
        menu.addAction(quit_action)

        self.tray.setContextMenu(menu)

    def _choose_image_dir(self) -> None:
        value = QFileDialog.getExistingDirectory(None, "Image Folder")
        if not value:
            return
        path = Path(value)
        self.config_store.set_image_dir(path)
        self.dispatcher.set_images(load_catalog(path))

    # ------------------------------------------------------------------
    # Callbacks (called from listener / worker threads → emit signals)
    # ------------------------------------------------------------------

    def _on_key(self, name: str, pressed: bool) -> None:
        self.ui.key_signal.emit(name, pressed)

    def _on_state_change(self, from_state: SessionState, to_state: SessionState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_error(self, code: str, message: str) -> None:
        self.ui.error_signal.emit(f"{ERROR_MESSAGES.get(code, code)} ({message})")

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_key_ui(self, name: str, pressed: bool) -> None:
        self.arbiter.handle(KeyEvent(key=name, pressed=pressed))
        self.tray.setIcon(_create_icon(ICON_ACTIVE if self.arbiter.activated else ICON_IDLE))

    def _on_error_ui(self, msg: str) -> None:
        self.status_bar.show_message(msg)

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        if to_state == SessionState.RECORDING.value:
            self.tray.setIcon(_create_icon(ICON_LISTENING))
        elif to_state == SessionState.IDLE.value:
            self.tray.setIcon(_create_icon(ICON_ACTIVE if self.arbiter.activated else ICON_IDLE))

    def _on_speech_outcome(self, outcome: SpeechOutcome) -> None:
        if outcome.code == NO_MATCH and outcome.hypotheses:
            self.status_bar.show_message(f'Not a command: "{outcome.hypotheses[0].utterance}"')
        elif outcome.command is not None:
            self.status_bar.show_message(f"Voice: {outcome.command.value}")

    def _on_tick(self) -> None:
        self.arbiter.tick()
        self.status_bar.update_snapshot(self.arbiter.snapshot())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        try:
            self.keyboard.start(on_key=self._on_key)
        except Exception as exc:
            self.status_bar.show_message(f"Keyboard disabled: {exc}")
        self.timer.start(TICK_MS)
        return self.app.exec()

    def quit(self) -> None:
        self.timer.stop()
        self.keyboard.stop()
        self.arbiter.shutdown()
        self.app.quit()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
