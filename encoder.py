"""Lossless FLAC encoding through the external ``flac`` command line tool."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import wave
from pathlib import Path
from typing import Optional

from errors import EncodeError

LOG = logging.getLogger("slideshow.speech")

WAVE_FILE = "input.wav"
FLAC_FILE = "input.flac"


def _write_wav(
    path: Path,
    pcm: bytes,
    sample_rate: int = 16000,
    channels: int = 1,
    sample_width: int = 2,
) -> None:
    """Wrap raw little-endian PCM bytes in a WAV container."""
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)


class FlacEncoder:
    def __init__(
        self,
        flac_path: str = "flac",
        work_dir: Optional[Path] = None,
        timeout_s: float = 10.0,
    ) -> None:
        self._flac_path = flac_path
        self._work_dir = work_dir or Path(tempfile.gettempdir()) / "mmi_slideshow"
        self._timeout_s = timeout_s

    @property
    def input_path(self) -> Path:
        return self._work_dir / WAVE_FILE

    @property
    def output_path(self) -> Path:
        return self._work_dir / FLAC_FILE

    def encode(self, pcm: bytes, sample_rate: int = 16000) -> bytes:
        binary = shutil.which(self._flac_path)
        if binary is None:
            raise EncodeError(f"flac encoder not found: {self._flac_path}")
        try:
            self._work_dir.mkdir(parents=True, exist_ok=True)
            _write_wav(self.input_path, pcm, sample_rate)
            self.output_path.unlink(missing_ok=True)
            subprocess.run(
                [binary, "-f", "--silent", "-o", str(self.output_path), str(self.input_path)],
                check=True,
                capture_output=True,
                timeout=self._timeout_s,
            )
            payload = self.output_path.read_bytes()
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or b"").decode("utf-8", errors="ignore").strip()
            raise EncodeError(f"flac exited with {exc.returncode}: {stderr}") from exc
        except subprocess.TimeoutExpired as exc:
            raise EncodeError(f"flac timed out after {self._timeout_s}s") from exc
        except (OSError, wave.Error) as exc:
            raise EncodeError(str(exc)) from exc
        LOG.debug("encoded %d PCM bytes to %d FLAC bytes", len(pcm), len(payload))
        return payload
