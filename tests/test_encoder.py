"""Tests for FlacEncoder."""

from __future__ import annotations

import subprocess
import wave
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from encoder import FLAC_FILE, WAVE_FILE, FlacEncoder, _write_wav
from errors import ENCODE_ERROR, EncodeError


def _fake_flac(args: list[str], **kwargs) -> MagicMock:  # noqa: ANN003
    output = Path(args[args.index("-o") + 1])
    output.write_bytes(b"fLaC" + b"\x00" * 8)
    return MagicMock(returncode=0)


def test_write_wav_produces_mono_16bit_16khz(tmp_path: Path) -> None:
    path = tmp_path / "x.wav"
    _write_wav(path, b"\x00\x00" * 1600)

    with wave.open(str(path), "rb") as wf:
        assert wf.getnchannels() == 1
        assert wf.getsampwidth() == 2
        assert wf.getframerate() == 16000
        assert wf.getnframes() == 1600


@patch("encoder.shutil.which", return_value="/usr/bin/flac")
@patch("encoder.subprocess.run", side_effect=_fake_flac)
def test_encode_runs_flac_on_fixed_files(mock_run: MagicMock, _which: MagicMock, tmp_path: Path) -> None:
    encoder = FlacEncoder(work_dir=tmp_path)

    payload = encoder.encode(b"\x00\x00" * 160)

    assert payload.startswith(b"fLaC")
    args = mock_run.call_args.args[0]
    assert args[0] == "/usr/bin/flac"
    assert args[-1] == str(tmp_path / WAVE_FILE)
    assert args[args.index("-o") + 1] == str(tmp_path / FLAC_FILE)
    assert mock_run.call_args.kwargs["check"] is True
    assert (tmp_path / WAVE_FILE).exists()


@patch("encoder.shutil.which", return_value=None)
def test_missing_binary_raises_encode_error(_which: MagicMock, tmp_path: Path) -> None:
    encoder = FlacEncoder(flac_path="/nope/flac", work_dir=tmp_path)

    with pytest.raises(EncodeError, match="not found") as info:
        encoder.encode(b"\x00\x00")
    assert info.value.code == ENCODE_ERROR


@patch("encoder.shutil.which", return_value="/usr/bin/flac")
@patch(
    "encoder.subprocess.run",
    side_effect=subprocess.CalledProcessError(1, ["flac"], stderr=b"bad input"),
)
def test_process_failure_raises_encode_error(_run: MagicMock, _which: MagicMock, tmp_path: Path) -> None:
    encoder = FlacEncoder(work_dir=tmp_path)

    with pytest.raises(EncodeError, match="bad input"):
        encoder.encode(b"\x00\x00")


@patch("encoder.shutil.which", return_value="/usr/bin/flac")
@patch("encoder.subprocess.run", side_effect=subprocess.TimeoutExpired(["flac"], 1.0))
def test_timeout_raises_encode_error(_run: MagicMock, _which: MagicMock, tmp_path: Path) -> None:
    encoder = FlacEncoder(work_dir=tmp_path, timeout_s=1.0)

    with pytest.raises(EncodeError, match="timed out"):
        encoder.encode(b"\x00\x00")


@patch("encoder.shutil.which", return_value="/usr/bin/flac")
@patch("encoder.subprocess.run", return_value=MagicMock(returncode=0))
def test_stale_output_is_not_reused(_run: MagicMock, _which: MagicMock, tmp_path: Path) -> None:
    (tmp_path / FLAC_FILE).write_bytes(b"fLaC-old")
    encoder = FlacEncoder(work_dir=tmp_path)

    # flac "succeeded" without writing output: the old file must not be sent.
    with pytest.raises(EncodeError):
        encoder.encode(b"\x00\x00")
