"""Simple JSON-based config store and fixed viewer settings."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

DEFAULT_ENDPOINT = "https://www.google.com/speech-api/v1/recognize"
LANG_EN_US = "en-US"
LANG_DE_DE = "de-DE"


@dataclass(frozen=True)
class ViewerSettings:
    canvas_width: int = 900
    canvas_height: int = 600
    scale_increment: float = 0.25
    max_scale: float = 3.0
    pan_increment: float = 0.05
    min_action_interval_s: float = 0.75


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "mmi_slideshow" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_trigger_key(self) -> str:
        data = self._read_all()
        return str(data.get("trigger_key", "0"))

    def set_trigger_key(self, key: str) -> None:
        self._update(trigger_key=key)

    def get_input_mode(self) -> str:
        data = self._read_all()
        return str(data.get("input_mode", "keyboard"))

    def set_input_mode(self, mode: str) -> None:
        self._update(input_mode=mode)

    def get_language_code(self) -> str:
        data = self._read_all()
        return str(data.get("language_code", LANG_EN_US))

    def set_language_code(self, code: str) -> None:
        self._update(language_code=code)

    def get_asr_endpoint(self) -> str:
        data = self._read_all()
        return str(data.get("asr_endpoint", DEFAULT_ENDPOINT))

    def get_request_timeout_s(self) -> float:
        data = self._read_all()
        try:
            value = float(data.get("request_timeout_s", 10.0))
        except (TypeError, ValueError):
            return 10.0
        return value if value > 0 else 10.0

    def get_flac_path(self) -> str:
        data = self._read_all()
        return str(data.get("flac_path", "flac"))

    def get_image_dir(self) -> Path:
        data = self._read_all()
        return Path(str(data.get("image_dir", Path.home() / "Pictures"))).expanduser()

    def set_image_dir(self, path: Path) -> None:
        self._update(image_dir=str(path))

    def get_async_speech(self) -> bool:
        data = self._read_all()
        return bool(data.get("async_speech", False))

    def _update(self, **values: object) -> None:
        data = self._read_all()
        data.update(values)
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
