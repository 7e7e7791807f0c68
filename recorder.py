"""Microphone adapter with a fixed capture format (mono, 16-bit signed, 16 kHz)."""

from __future__ import annotations

import logging
import threading
import time
from queue import Full, Queue
from typing import Any, Optional

from errors import DeviceUnavailableError
from models import AudioFrame

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

LOG = logging.getLogger("slideshow.speech")

SAMPLE_RATE = 16000
CHANNELS = 1
SAMPLE_DTYPE = "int16"


class SoundDeviceRecorder:
    """Feeds one capture's audio blocks into the queue handed to ``start``.

    The format is not configurable: the encoder and the recognition
    request both assume 16 kHz mono PCM. Each block is stamped with its
    offset from the start of the capture.
    """

    sample_rate = SAMPLE_RATE
    channels = CHANNELS

    def __init__(self, block_ms: int = 100, end_timeout_s: float = 0.5) -> None:
        self.block_ms = block_ms
        self.end_timeout_s = end_timeout_s
        self.dropped_chunks = 0
        self._lock = threading.Lock()
        self._stream: Any = None
        self._sink: Optional[Queue[AudioFrame | None]] = None
        self._started_at = 0.0

    def start(self, audio_queue: Queue[AudioFrame | None]) -> None:
        with self._lock:
            if self._stream is not None:
                return
            if sd is None:
                raise DeviceUnavailableError("sounddevice is not installed")
            self.dropped_chunks = 0
            self._started_at = time.monotonic()
            self._sink = audio_queue
            try:
                self._stream = self._open_stream()
            except DeviceUnavailableError:
                self._sink = None
                raise

    def stop(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
            sink, self._sink = self._sink, None
            if stream is not None:
                stream.stop()
                stream.close()
                if self.dropped_chunks:
                    LOG.warning("capture lost %d audio blocks to a full queue", self.dropped_chunks)
            if sink is not None:
                self._end_capture(sink)

    def _open_stream(self) -> Any:
        try:
            stream = sd.InputStream(
                samplerate=SAMPLE_RATE,
                channels=CHANNELS,
                dtype=SAMPLE_DTYPE,
                blocksize=SAMPLE_RATE * self.block_ms // 1000,
                callback=self._on_audio,
            )
            stream.start()
        except Exception as exc:
            raise DeviceUnavailableError(f"audio input unavailable: {exc}") from exc
        return stream

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        sink = self._sink
        if sink is None or np is None:
            return
        if status:
            LOG.debug("input status: %s", status)
        frame = AudioFrame(
            pcm16_bytes=np.asarray(indata, dtype=np.int16).tobytes(),
            sample_rate=SAMPLE_RATE,
            channels=CHANNELS,
            timestamp_ms=int((time.monotonic() - self._started_at) * 1000),
        )
        try:
            sink.put_nowait(frame)
        except Full:
            self.dropped_chunks += 1

    def _end_capture(self, sink: Queue[AudioFrame | None]) -> None:
        # The collecting thread waits for this marker; wait briefly for room.
        try:
            sink.put(None, timeout=self.end_timeout_s)
        except Full:
            LOG.error("frame queue still full after %.1fs; end of capture not delivered", self.end_timeout_s)
