"""One push-to-talk audio capture: device frames in, a finished PCM buffer out."""

from __future__ import annotations

import logging
import threading
from queue import Empty, Queue
from typing import Optional

from errors import DeviceUnavailableError, SessionBusyError
from interfaces import Recorder
from models import AudioFrame, CaptureState

LOG = logging.getLogger("slideshow.speech")

DEFAULT_SAMPLE_RATE = 16000


class AudioCaptureSession:
    """Collects frames from a recorder on a dedicated worker thread.

    The recorder pushes frames (and a ``None`` sentinel on stop) into a
    queue; the worker appends them to its own buffer and hands the finished
    bytes back through a second queue. No sample data is shared between the
    worker and the caller outside those two queues.
    """

    def __init__(
        self,
        recorder: Recorder,
        queue_maxsize: int = 200,
        stop_timeout_s: float = 2.0,
    ) -> None:
        self._recorder = recorder
        self._queue_maxsize = queue_maxsize
        self._stop_timeout_s = stop_timeout_s
        self._state = CaptureState.IDLE
        self._lock = threading.Lock()
        self._audio_queue: Queue[AudioFrame | None] = Queue(maxsize=queue_maxsize)
        self._done: Queue[tuple[bytes, int]] = Queue(maxsize=1)
        self._worker: Optional[threading.Thread] = None
        self.sample_rate = DEFAULT_SAMPLE_RATE

    @property
    def state(self) -> CaptureState:
        return self._state

    def start(self) -> None:
        with self._lock:
            if self._state != CaptureState.IDLE:
                raise SessionBusyError(f"capture session is {self._state.value}")
            self._audio_queue = Queue(maxsize=self._queue_maxsize)
            self._done = Queue(maxsize=1)
            self._recorder.start(self._audio_queue)
            self._worker = threading.Thread(
                target=self._collect,
                args=(self._audio_queue, self._done),
                daemon=True,
            )
            self._worker.start()
            self._state = CaptureState.CAPTURING
            LOG.info("capture started")

    def stop(self) -> bytes:
        with self._lock:
            if self._state != CaptureState.CAPTURING:
                raise RuntimeError(f"cannot stop capture in state {self._state.value}")
            self._state = CaptureState.STOPPED
            self._recorder.stop()
            try:
                pcm, self.sample_rate = self._done.get(timeout=self._stop_timeout_s)
            except Empty:
                raise DeviceUnavailableError("capture worker did not finish") from None
            LOG.info("capture stopped: %d bytes", len(pcm))
            return pcm

    def close(self) -> None:
        """Release the device whatever state the session is in."""
        with self._lock:
            if self._state == CaptureState.CAPTURING:
                try:
                    self._recorder.stop()
                except Exception as exc:  # pragma: no cover
                    LOG.warning("recorder stop failed: %s", exc)
            self._worker = None
            self._state = CaptureState.IDLE

    def _collect(
        self,
        audio_queue: Queue[AudioFrame | None],
        done: Queue[tuple[bytes, int]],
    ) -> None:
        pcm = bytearray()
        sample_rate = DEFAULT_SAMPLE_RATE
        while True:
            frame = audio_queue.get()
            if frame is None:
                break
            pcm.extend(frame.pcm16_bytes)
            sample_rate = frame.sample_rate
        done.put((bytes(pcm), sample_rate))
