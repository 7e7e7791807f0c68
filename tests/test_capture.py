"""Tests for AudioCaptureSession."""

from __future__ import annotations

from queue import Queue

import pytest

from capture import AudioCaptureSession
from errors import DeviceUnavailableError, SessionBusyError
from models import AudioFrame, CaptureState


class FakeRecorder:
    """Pushes canned frames when started, the sentinel when stopped."""

    def __init__(self, frames: list[bytes] | None = None, fail: bool = False) -> None:
        self.frames = frames or []
        self.fail = fail
        self.started = 0
        self.stopped = 0
        self.queue: Queue[AudioFrame | None] | None = None

    def start(self, audio_queue: Queue[AudioFrame | None]) -> None:
        if self.fail:
            raise DeviceUnavailableError("no microphone")
        self.started += 1
        self.queue = audio_queue
        for pcm in self.frames:
            audio_queue.put(AudioFrame(pcm16_bytes=pcm))

    def stop(self) -> None:
        self.stopped += 1
        if self.queue is not None:
            self.queue.put(None)


class SilentRecorder(FakeRecorder):
    """Never delivers the sentinel, like a wedged device."""

    def stop(self) -> None:
        self.stopped += 1


def test_start_stop_returns_collected_pcm() -> None:
    recorder = FakeRecorder(frames=[b"\x01\x00" * 4, b"\x02\x00" * 4])
    session = AudioCaptureSession(recorder)

    session.start()
    assert session.state == CaptureState.CAPTURING

    pcm = session.stop()
    assert pcm == b"\x01\x00" * 4 + b"\x02\x00" * 4
    assert session.state == CaptureState.STOPPED
    assert recorder.stopped == 1


def test_start_while_capturing_is_rejected() -> None:
    recorder = FakeRecorder()
    session = AudioCaptureSession(recorder)
    session.start()

    with pytest.raises(SessionBusyError):
        session.start()

    assert recorder.started == 1
    assert session.state == CaptureState.CAPTURING
    session.stop()


def test_stop_outside_capturing_is_an_error() -> None:
    session = AudioCaptureSession(FakeRecorder())

    with pytest.raises(RuntimeError):
        session.stop()

    session.start()
    session.stop()
    with pytest.raises(RuntimeError):
        session.stop()


def test_device_failure_leaves_session_idle() -> None:
    session = AudioCaptureSession(FakeRecorder(fail=True))

    with pytest.raises(DeviceUnavailableError):
        session.start()

    assert session.state == CaptureState.IDLE


def test_close_returns_to_idle_and_allows_restart() -> None:
    recorder = FakeRecorder(frames=[b"\x00\x00"])
    session = AudioCaptureSession(recorder)
    session.start()
    session.stop()

    session.close()
    assert session.state == CaptureState.IDLE

    session.start()
    assert session.stop() == b"\x00\x00"


def test_close_while_capturing_releases_device() -> None:
    recorder = FakeRecorder()
    session = AudioCaptureSession(recorder)
    session.start()

    session.close()

    assert recorder.stopped == 1
    assert session.state == CaptureState.IDLE


def test_stop_times_out_when_worker_never_finishes() -> None:
    session = AudioCaptureSession(SilentRecorder(), stop_timeout_s=0.05)
    session.start()

    with pytest.raises(DeviceUnavailableError, match="did not finish"):
        session.stop()

    session.close()
    assert session.state == CaptureState.IDLE


def test_sample_rate_comes_back_with_the_buffer() -> None:
    recorder = FakeRecorder()
    session = AudioCaptureSession(recorder)

    session.start()
    assert recorder.queue is not None
    recorder.queue.put(AudioFrame(pcm16_bytes=b"\x01\x00" * 4, sample_rate=8000))
    assert session.sample_rate == 16000

    pcm = session.stop()
    assert pcm == b"\x01\x00" * 4
    assert session.sample_rate == 8000


def test_empty_capture_keeps_default_sample_rate() -> None:
    session = AudioCaptureSession(FakeRecorder())
    session.start()
    assert session.stop() == b""
    assert session.sample_rate == 16000
