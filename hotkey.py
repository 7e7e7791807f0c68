"""Global keyboard adapter based on pynput."""

from __future__ import annotations

import threading
from typing import Callable, Optional

try:
    from pynput import keyboard
except Exception:  # pragma: no cover
    keyboard = None  # type: ignore

KeyCallback = Callable[[str, bool], None]


def key_name(key: object) -> str:
    """Printable keys by their character, special keys as ``Key.xxx``."""
    char = getattr(key, "char", None)
    if isinstance(char, str) and char:
        return char.casefold()
    return str(key)


class GlobalKeyboardAdapter:
    """Forwards key presses and releases as ``(name, pressed)``.

    Auto-repeat presses of keys named in ``suppress_repeat`` (the trigger
    key) are dropped while the key is held. Other keys keep repeating,
    which drives continuous zoom and pan.
    """

    def __init__(self, suppress_repeat: tuple[str, ...] = ()) -> None:
        self._suppress_repeat = frozenset(suppress_repeat)
        self._listener: Optional[object] = None
        self._held: set[str] = set()
        self._lock = threading.Lock()

    def start(self, on_key: KeyCallback) -> None:
        if keyboard is None:
            raise RuntimeError("pynput is not installed")

        def _on_press(key: object) -> None:
            name = key_name(key)
            with self._lock:
                if name in self._suppress_repeat and name in self._held:
                    return
                self._held.add(name)
            on_key(name, True)

        def _on_release(key: object) -> None:
            name = key_name(key)
            with self._lock:
                self._held.discard(name)
            on_key(name, False)

        self._listener = keyboard.Listener(on_press=_on_press, on_release=_on_release)
        self._listener.start()

    def stop(self) -> None:
        listener = self._listener
        if listener is not None:
            listener.stop()
            self._listener = None
